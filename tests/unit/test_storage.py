"""Unit tests for artifact persistence."""

import json

import pytest

from writing_style.codify.codifier import RuleCodifier
from writing_style.corpus.analyzer import StyleProfileAnalyzer
from writing_style.errors import ArtifactError, ModelMismatchError
from writing_style.pipeline import ingest
from writing_style.rag.corpus_indexer import CorpusIndexer
from writing_style.storage import ArtifactStore

from tests.fixtures.fake_embeddings import HashingEmbeddingProvider
from tests.fixtures.sample_corpus import TOPIC_DOCUMENTS, style_corpus


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(str(tmp_path / "writing-system"))


@pytest.fixture(scope="module")
def report():
    return ingest(style_corpus(6))


class TestDocuments:
    """Test corpus persistence."""

    def test_round_trip(self, store, report):
        store.save_documents(report)
        loaded = store.load_documents()

        assert loaded == report.documents

    def test_layout(self, store, report):
        store.save_documents(report)
        doc = report.documents[0]

        assert (store.root / "corpus" / "structured" / f"{doc.id}.json").exists()
        raw = store.root / "corpus" / "raw" / f"{doc.id}.md"
        assert raw.read_text(encoding="utf-8") == doc.raw_content
        index = json.loads((store.root / "corpus" / "index.json").read_text())
        assert index["totalDocuments"] == 6

    def test_load_subset(self, store, report):
        store.save_documents(report)
        ids = [report.documents[3].id, report.documents[1].id]

        assert [d.id for d in store.load_documents(ids)] == ids

    def test_missing_corpus(self, store):
        with pytest.raises(ArtifactError, match="not found"):
            store.load_documents()


class TestProfileAndSpec:
    """Test profile and spec persistence."""

    def test_profile_round_trip(self, store, report):
        profile = StyleProfileAnalyzer().analyze(report.documents)
        store.save_profile(profile)

        assert store.load_profile() == profile

    def test_spec_round_trip(self, store, report):
        profile = StyleProfileAnalyzer().analyze(report.documents)
        spec = RuleCodifier().codify(profile, report.documents)
        store.save_spec(spec)

        assert store.load_spec().to_dict() == spec.to_dict()

    def test_corrupt_artifact(self, store):
        store.profile_path.parent.mkdir(parents=True)
        store.profile_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ArtifactError, match="Corrupt"):
            store.load_profile()

    def test_malformed_spec(self, store):
        store.spec_path.parent.mkdir(parents=True)
        store.spec_path.write_text(json.dumps({"rules": [{"id": "x"}]}), encoding="utf-8")

        with pytest.raises(ArtifactError, match="Malformed"):
            store.load_spec()


class TestVectorIndex:
    """Test vector index persistence."""

    @pytest.fixture
    def index(self):
        documents = ingest(TOPIC_DOCUMENTS).documents
        index, _ = CorpusIndexer().build(documents, HashingEmbeddingProvider(dimensions=32))
        return index

    def test_round_trip(self, store, index):
        store.save_index(index)
        assert store.load_index() == index

    def test_expected_model_checked(self, store, index):
        store.save_index(index)

        assert store.load_index(expected_model="hashing-bow", expected_dimensions=32) == index
        with pytest.raises(ModelMismatchError):
            store.load_index(expected_model="all-MiniLM-L6-v2")
        with pytest.raises(ModelMismatchError):
            store.load_index(expected_dimensions=384)

    def test_dimension_corruption_detected(self, store, index):
        data = index.to_dict()
        data["embeddings"][0]["embedding"] = data["embeddings"][0]["embedding"][:-1]
        store.index_path.parent.mkdir(parents=True)
        store.index_path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(ArtifactError, match="dims"):
            store.load_index()

    def test_missing_fields(self, store):
        store.index_path.parent.mkdir(parents=True)
        store.index_path.write_text(json.dumps({"dimensions": 3}), encoding="utf-8")

        with pytest.raises(ArtifactError, match="Malformed"):
            store.load_index()
