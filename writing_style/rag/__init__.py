"""Chunking, embedding and semantic retrieval.

Architecture:
    Documents → Chunker → EmbeddingProvider → VectorIndex → SemanticRetriever
                (paragraphs) (batched, pooled)  (immutable)  (cosine, capped)

Usage:
    from writing_style.rag import CorpusIndexer, SemanticRetriever, create_provider
    provider = create_provider(config.embedding)
    index, report = CorpusIndexer(config.embedding).build(documents, provider)
    results = SemanticRetriever(index, provider).search("yield farming risks")
"""

from .chunker import SUMMARY_CHUNK_INDEX, Chunk, chunk_document, chunk_documents
from .embeddings import (
    EmbeddingProvider,
    OllamaEmbeddingProvider,
    SentenceTransformerProvider,
    create_provider,
    register_provider,
)
from .vector_index import IndexEntry, VectorIndex
from .corpus_indexer import CorpusIndexer, EmbedReport, FailedChunk
from .retriever import (
    ChromaSearchBackend,
    LinearSearchBackend,
    RankedChunk,
    SemanticRetriever,
    apply_document_cap,
    cosine_similarities,
    search,
)

__all__ = [
    # Chunking
    "SUMMARY_CHUNK_INDEX",
    "Chunk",
    "chunk_document",
    "chunk_documents",
    # Providers
    "EmbeddingProvider",
    "OllamaEmbeddingProvider",
    "SentenceTransformerProvider",
    "create_provider",
    "register_provider",
    # Index
    "IndexEntry",
    "VectorIndex",
    "CorpusIndexer",
    "EmbedReport",
    "FailedChunk",
    # Retrieval
    "ChromaSearchBackend",
    "LinearSearchBackend",
    "RankedChunk",
    "SemanticRetriever",
    "apply_document_cap",
    "cosine_similarities",
    "search",
]
