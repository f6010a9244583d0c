"""Book retrieval-augmented generation pipeline backed by Ollama."""

__version__ = "0.1.0"
