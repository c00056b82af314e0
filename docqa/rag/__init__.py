"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- PDF text extraction
- Size-bounded document chunking
- Embedding generation
- FAISS vector storage
- Semantic retrieval
- Prompt composition, answer generation and confidence scoring
"""
