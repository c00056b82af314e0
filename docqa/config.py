"""Application configuration with sensible defaults."""
import os

# Ollama configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
CHAT_MODEL = os.getenv("CHAT_MODEL", "deepseek-coder:6.7b")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "nomic-embed-text")

# Unset means the dimension is detected from the embedding model at startup
EMBEDDING_DIMENSION = (
    int(os.environ["EMBEDDING_DIMENSION"]) if os.getenv("EMBEDDING_DIMENSION") else None
)
EMBEDDING_BATCH_SIZE = int(os.getenv("EMBEDDING_BATCH_SIZE", "32"))

# RAG parameters (character-based to avoid tokenizer inconsistencies)
MAX_CHUNK_CHARS = int(os.getenv("MAX_CHUNK_CHARS", "1000"))
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "3"))
MAX_CONTEXT_CHARS = int(os.getenv("MAX_CONTEXT_CHARS", "4000"))
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.0"))

# Answer returned when the index has nothing relevant to offer
NO_ANSWER_TEXT = os.getenv("NO_ANSWER_TEXT", "insufficient information")

# Network behaviour for every Ollama call
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30.0"))
RETRY_BACKOFF = float(os.getenv("RETRY_BACKOFF", "0.5"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")  # "console" or "json"
