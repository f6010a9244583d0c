"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- Book text cleanup and chapter splitting
- Paragraph chunking with overlap
- In-memory vector storage
- Cosine similarity
- Diversity-filtered retrieval
"""
