"""Unit tests for semantic retrieval."""

import numpy as np
import pytest
from unittest.mock import MagicMock, patch

from writing_style.config import EmbeddingConfig, RetrievalConfig
from writing_style.corpus.preprocessor import TextPreprocessor
from writing_style.errors import ModelMismatchError
from writing_style.rag.corpus_indexer import CorpusIndexer
from writing_style.rag.retriever import (
    ChromaSearchBackend,
    RankedChunk,
    SemanticRetriever,
    apply_document_cap,
    cosine_similarities,
    rank_results,
    search,
)

from tests.fixtures.fake_embeddings import HashingEmbeddingProvider
from tests.fixtures.sample_corpus import TOPIC_DOCUMENTS


@pytest.fixture(scope="module")
def provider():
    return HashingEmbeddingProvider(dimensions=256)


@pytest.fixture(scope="module")
def topic_index(provider):
    preprocessor = TextPreprocessor()
    documents = [preprocessor.process(text, source) for source, text in TOPIC_DOCUMENTS]
    index, _ = CorpusIndexer(EmbeddingConfig(batch_size=4)).build(documents, provider)
    return index


def hit(doc_id, chunk_index, score):
    return RankedChunk(doc_id, chunk_index, None, "", "", score)


class TestSearch:
    """Test end-to-end search over a small topical index."""

    def test_topical_query_ranks_section_first(self, topic_index, provider):
        results = search("yield farming risks", topic_index, provider)

        assert results[0].rank == 1
        assert results[0].text == "Yield farming risks"
        assert results[0].source == "defi.md"
        assert results[0].score > 0.9

    def test_self_match(self, topic_index, provider):
        text = "Tomatoes need warm soil and steady watering."
        results = search(text, topic_index, provider)

        assert results[0].text == text
        assert results[0].score == pytest.approx(1.0, abs=1e-5)

    def test_scores_descending_and_ranked(self, topic_index, provider):
        results = search("steady dinner soil", topic_index, provider, threshold=0.0)

        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert [r.rank for r in results] == list(range(1, len(results) + 1))

    def test_threshold_filters(self, topic_index, provider):
        results = search("yield farming risks", topic_index, provider, threshold=0.99)

        assert len(results) == 1
        assert all(r.score >= 0.99 for r in results)

    def test_per_document_cap(self, topic_index, provider):
        results = search(
            "decentralized finance", topic_index, provider,
            threshold=-1.0, per_doc_cap=1
        )
        doc_ids = [r.doc_id for r in results]

        assert len(doc_ids) == len(set(doc_ids)) == 3

    def test_top_k(self, topic_index, provider):
        results = search("weeks", topic_index, provider, top_k=2, threshold=-1.0, per_doc_cap=5)
        assert len(results) == 2

    def test_empty_query(self, topic_index, provider):
        assert search("   ", topic_index, provider) == []

    def test_model_mismatch_refused(self, topic_index):
        other = HashingEmbeddingProvider(dimensions=256, model="other-model")

        with pytest.raises(ModelMismatchError):
            search("anything", topic_index, other)

    def test_dimension_mismatch_refused(self, topic_index):
        other = HashingEmbeddingProvider(dimensions=128)

        with pytest.raises(ModelMismatchError):
            SemanticRetriever(topic_index, other)

    def test_config_defaults(self, topic_index, provider):
        retriever = SemanticRetriever(
            topic_index, provider, RetrievalConfig(top_k=1, threshold=-1.0)
        )
        assert len(retriever.search("cooking")) == 1


class TestRanking:
    """Test ranking helpers."""

    def test_ties_keep_index_order(self):
        results = rank_results(
            [hit("a", 0, 0.5), hit("b", 0, 0.5), hit("c", 0, 0.9)],
            top_k=10, threshold=0.0, per_doc_cap=2
        )
        assert [r.doc_id for r in results] == ["c", "a", "b"]

    def test_cap_applied_before_top_k(self):
        results = rank_results(
            [hit("a", 0, 0.9), hit("a", 1, 0.8), hit("a", 2, 0.7), hit("b", 0, 0.6)],
            top_k=3, threshold=0.0, per_doc_cap=2
        )
        assert [(r.doc_id, r.chunk_index) for r in results] == [("a", 0), ("a", 1), ("b", 0)]

    def test_apply_document_cap(self):
        capped = apply_document_cap([hit("a", 0, 0.9), hit("a", 1, 0.8)], 1)
        assert len(capped) == 1

    def test_cosine_zero_vectors(self):
        matrix = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 2.0]], dtype=np.float32)
        scores = cosine_similarities(matrix, [1.0, 0.0])

        assert scores.tolist() == pytest.approx([0.0, 1.0, 0.0])
        assert cosine_similarities(matrix, [0.0, 0.0]).tolist() == [0.0, 0.0, 0.0]

    def test_summary_flag(self):
        assert hit("a", -1, 0.5).is_summary
        assert not hit("a", 0, 0.5).is_summary


class TestChromaBackend:
    """Test the approximate backend with ChromaDB mocked."""

    def test_distances_converted_to_similarity(self, topic_index, provider):
        collection = MagicMock()
        collection.query.return_value = {"ids": [["2", "0"]], "distances": [[0.05, 0.6]]}
        chromadb = MagicMock()
        chromadb.Client.return_value.create_collection.return_value = collection

        with patch("writing_style.rag.retriever.get_chromadb", return_value=chromadb):
            retriever = SemanticRetriever(
                topic_index, provider, RetrievalConfig(backend="chroma", threshold=0.3)
            )
            results = retriever.search("yield farming")

        assert isinstance(retriever.backend, ChromaSearchBackend)
        assert [r.score for r in results] == pytest.approx([0.95, 0.4])
        assert results[0].doc_id == topic_index.entries[2].doc_id
        create_kwargs = chromadb.Client.return_value.create_collection.call_args.kwargs
        assert create_kwargs["metadata"] == {"hnsw:space": "cosine"}
        assert len(collection.add.call_args.kwargs["ids"]) == topic_index.chunk_count

    def test_two_indexes_in_one_process_keep_separate_collections(self, provider):
        pytest.importorskip("chromadb")
        preprocessor = TextPreprocessor()
        indexer = CorpusIndexer(EmbeddingConfig(batch_size=4))
        first, _ = indexer.build(
            [preprocessor.process(text, source) for source, text in TOPIC_DOCUMENTS[:1]], provider
        )
        second, _ = indexer.build(
            [preprocessor.process(text, source) for source, text in TOPIC_DOCUMENTS[1:]], provider
        )
        chroma = RetrievalConfig(backend="chroma", threshold=-1.0)

        SemanticRetriever(first, provider, chroma).search("yield farming risks")
        query = "Tomatoes need warm soil and steady watering."
        approximate = SemanticRetriever(second, provider, chroma).search(query)
        exact = SemanticRetriever(second, provider, RetrievalConfig(threshold=-1.0)).search(query)

        assert {r.source for r in approximate} <= {"gardening.md", "cooking.md"}
        assert approximate[0].source == exact[0].source == "gardening.md"
        assert approximate[0].chunk_index == exact[0].chunk_index
        assert approximate[0].score == pytest.approx(exact[0].score, abs=1e-3)
