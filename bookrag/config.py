"""Application configuration with sensible defaults."""
import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"
BOOK_PATH = Path(os.getenv("BOOK_PATH", str(DATA_DIR / "books" / "rag.txt")))

# Ollama configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
CHAT_MODEL = os.getenv("CHAT_MODEL", "gemma2:2b")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "nomic-embed-text")
OLLAMA_TIMEOUT = float(os.getenv("OLLAMA_TIMEOUT", "60.0"))

# Chunking (estimated tokens: ceil(words / 0.75))
CHUNK_MAX_TOKENS = int(os.getenv("CHUNK_MAX_TOKENS", "700"))
CHUNK_OVERLAP_TOKENS = int(os.getenv("CHUNK_OVERLAP_TOKENS", "100"))
MAX_CHUNK_CHARS = int(os.getenv("MAX_CHUNK_CHARS", "8000"))  # hard cap before embedding
MIN_CHUNK_CHARS = int(os.getenv("MIN_CHUNK_CHARS", "200"))   # shorter chunks are dropped
MIN_LINE_CHARS = int(os.getenv("MIN_LINE_CHARS", "30"))      # extraction noise filter

# Retrieval
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "6"))
DIVERSITY_THRESHOLD = float(os.getenv("DIVERSITY_THRESHOLD", "0.85"))
CONTEXT_SEPARATOR = "\n---\n"

# Ingestion
EMBED_CONCURRENCY = int(os.getenv("EMBED_CONCURRENCY", "4"))

# Generation
SYSTEM_PROMPT = "The assistant will act like a helpful research assistant."
RETRIEVAL_QUERY = os.getenv(
    "RETRIEVAL_QUERY", "Unsolved problems, inefficiencies, and emerging needs"
)
