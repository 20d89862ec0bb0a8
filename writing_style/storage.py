"""Artifact persistence under a storage root.

Layout:
    corpus/index.json              corpus index
    corpus/structured/<id>.json    parsed documents
    corpus/raw/<id>.md             original text
    analysis/StyleProfile.json
    vectors/embeddings.json
    spec/StyleSpec.json
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from .codify.models import StyleSpec
from .corpus.loader import IngestReport
from .corpus.preprocessor import Document
from .corpus.profile import StyleProfile
from .errors import ArtifactError
from .rag.vector_index import VectorIndex
from .utils.logging import get_logger

logger = get_logger(__name__)


class ArtifactStore:
    """Reads and writes pipeline artifacts as JSON files."""

    def __init__(self, root: str):
        self.root = Path(root)

    @property
    def corpus_dir(self) -> Path:
        return self.root / "corpus"

    @property
    def profile_path(self) -> Path:
        return self.root / "analysis" / "StyleProfile.json"

    @property
    def index_path(self) -> Path:
        return self.root / "vectors" / "embeddings.json"

    @property
    def spec_path(self) -> Path:
        return self.root / "spec" / "StyleSpec.json"

    def _write_json(self, path: Path, data: Dict, indent: Optional[int] = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        logger.debug(f"Wrote {path}")

    def _read_json(self, path: Path) -> Dict:
        if not path.exists():
            raise ArtifactError(f"Artifact not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ArtifactError(f"Corrupt artifact {path}: {e}")

    # Corpus

    def save_documents(self, report: IngestReport) -> None:
        """Persist ingested documents and the corpus index."""
        structured = self.corpus_dir / "structured"
        raw = self.corpus_dir / "raw"
        raw.mkdir(parents=True, exist_ok=True)

        for doc in report.documents:
            self._write_json(structured / f"{doc.id}.json", doc.to_dict())
            (raw / f"{doc.id}.md").write_text(doc.raw_content, encoding="utf-8")

        self._write_json(self.corpus_dir / "index.json", report.to_index())
        logger.info(f"Saved {len(report.documents)} documents to {self.corpus_dir}")

    def load_documents(self, ids: Optional[List[str]] = None) -> List[Document]:
        """Load parsed documents, in corpus index order.

        Args:
            ids: Optional subset of document ids (e.g. exemplars).

        Raises:
            ArtifactError: If the index or a listed document is missing.
        """
        index = self._read_json(self.corpus_dir / "index.json")
        wanted = [d["id"] for d in index.get("documents", [])] if ids is None else ids
        return [
            Document.from_dict(self._read_json(self.corpus_dir / "structured" / f"{doc_id}.json"))
            for doc_id in wanted
        ]

    # Profile

    def save_profile(self, profile: StyleProfile) -> None:
        self._write_json(self.profile_path, profile.to_dict())
        logger.info(f"Saved style profile to {self.profile_path}")

    def load_profile(self) -> StyleProfile:
        return StyleProfile.from_dict(self._read_json(self.profile_path))

    # Vector index

    def save_index(self, index: VectorIndex) -> None:
        # Vectors make this file large; skip indentation
        self._write_json(self.index_path, index.to_dict(), indent=None)
        logger.info(f"Saved vector index ({index.chunk_count} chunks) to {self.index_path}")

    def load_index(
        self,
        expected_model: Optional[str] = None,
        expected_dimensions: Optional[int] = None
    ) -> VectorIndex:
        """Load the vector index, optionally checking its model.

        Raises:
            ArtifactError: If the index is missing or corrupt.
            ModelMismatchError: If the expected model or dimensions differ.
        """
        index = VectorIndex.from_dict(self._read_json(self.index_path))
        if expected_model is not None or expected_dimensions is not None:
            index.assert_compatible(
                expected_model if expected_model is not None else index.model,
                expected_dimensions if expected_dimensions is not None else index.dimensions,
            )
        return index

    # Spec

    def save_spec(self, spec: StyleSpec) -> None:
        self._write_json(self.spec_path, spec.to_dict())
        logger.info(f"Saved style spec ({len(spec.rules)} rules) to {self.spec_path}")

    def load_spec(self) -> StyleSpec:
        try:
            return StyleSpec.from_dict(self._read_json(self.spec_path))
        except (KeyError, ValueError) as e:
            raise ArtifactError(f"Malformed style spec: {e}")
