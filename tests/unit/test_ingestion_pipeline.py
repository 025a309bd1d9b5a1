"""
Unit tests for ingestion pipeline module.

Tests the complete build workflow including:
- Directory builds
- In-memory text builds
- Deduplication in load order
- Skipped documents
- Error handling
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from interview_qa.corpus.index import Corpus
from interview_qa.ingestion.extractor import RecordExtractor
from interview_qa.ingestion.loader import MarkdownLoader
from interview_qa.ingestion.pipeline import BuildResult, DocumentResult, IngestionPipeline
from interview_qa.models import MarkdownDocument
from interview_qa.utils.exceptions import SourceUnavailableError
from interview_qa.utils.logging import get_run_id

SECURITY_KEY = "how do you ensure api security on the server-side"


@pytest.fixture
def pipeline() -> IngestionPipeline:
    """Create a pipeline with real components."""
    return IngestionPipeline(loader=MarkdownLoader(), extractor=RecordExtractor(), max_workers=2)


class TestDocumentResult:
    """Test DocumentResult dataclass."""

    def test_create_successful_result(self):
        """Should create a successful result."""
        result = DocumentResult(
            identifier="nodejs.md",
            success=True,
            loaded=True,
            records_extracted=3,
            records_inserted=2,
            duplicates=1,
        )

        assert result.error is None
        assert str(result) == "✓ nodejs.md: 3 extracted → 2 inserted, 1 duplicates"

    def test_create_failed_result(self):
        """Should create a failed result with error."""
        result = DocumentResult(identifier="empty.md", success=False, error="Document is empty")

        assert result.loaded is False
        assert str(result) == "✗ empty.md: Document is empty"


class TestBuildResult:
    """Test BuildResult aggregation."""

    def test_summary(self):
        """Should aggregate per-document counts."""
        result = BuildResult(
            corpus=Corpus(),
            results=[
                DocumentResult("a.md", True, loaded=True, records_extracted=3, records_inserted=3),
                DocumentResult("b.md", True, loaded=True, records_extracted=2, records_inserted=1, duplicates=1),
                DocumentResult("c.md", False, loaded=True, error="No Q&A records"),
                DocumentResult("d.md", False, error="Document is empty"),
            ],
        )

        assert result.summary() == {
            "documents_found": 4,
            "documents_loaded": 3,
            "documents_skipped": 1,
            "records_extracted": 5,
            "records_inserted": 4,
            "duplicates_discarded": 1,
        }
        assert str(result) == (
            "3 documents loaded, 5 records extracted, 1 duplicates discarded, 1 documents skipped"
        )


class TestIngestionPipelineInit:
    """Test pipeline initialization."""

    def test_invalid_worker_count(self):
        """Should reject fewer than one worker."""
        with pytest.raises(ValueError, match="max_workers must be at least 1"):
            IngestionPipeline(loader=MarkdownLoader(), extractor=RecordExtractor(), max_workers=0)


class TestBuildFromDirectory:
    """Test directory builds."""

    @pytest.mark.asyncio
    async def test_build_counts(self, pipeline, temp_document_dir: Path):
        """Should report loaded, skipped and duplicate counts."""
        result = await pipeline.build_from_directory(temp_document_dir)

        assert result.summary() == {
            "documents_found": 5,
            "documents_loaded": 4,
            "documents_skipped": 1,
            "records_extracted": 6,
            "records_inserted": 5,
            "duplicates_discarded": 1,
        }
        assert len(result.corpus) == 5
        assert result.corpus.frozen is True

    @pytest.mark.asyncio
    async def test_results_in_load_order(self, pipeline, temp_document_dir: Path):
        """Should report documents sorted by identifier."""
        result = await pipeline.build_from_directory(temp_document_dir)

        assert [r.identifier for r in result.results] == [
            "empty.md",
            "express.md",
            "mongodb/basics.md",
            "nodejs.md",
            "readme.md",
        ]

    @pytest.mark.asyncio
    async def test_first_loaded_document_wins(self, pipeline, temp_document_dir: Path):
        """Should keep the duplicate question from the first-loaded document."""
        result = await pipeline.build_from_directory(temp_document_dir)

        matches = [r for r in result.corpus.all() if r.normalized_question == SECURITY_KEY]
        assert len(matches) == 1
        assert matches[0].source_document == "express.md"

        nodejs = next(r for r in result.results if r.identifier == "nodejs.md")
        assert nodejs.records_extracted == 3
        assert nodejs.records_inserted == 2
        assert nodejs.duplicates == 1

    @pytest.mark.asyncio
    async def test_skipped_documents_reported(self, pipeline, temp_document_dir: Path):
        """Should report empty and question-free documents without failing."""
        result = await pipeline.build_from_directory(temp_document_dir)
        by_id = {r.identifier: r for r in result.results}

        assert by_id["empty.md"].success is False
        assert by_id["empty.md"].loaded is False
        assert "empty" in by_id["empty.md"].error

        assert by_id["readme.md"].success is False
        assert by_id["readme.md"].loaded is True
        assert "No Q&A records" in by_id["readme.md"].error

    @pytest.mark.asyncio
    async def test_non_recursive(self, pipeline, temp_document_dir: Path):
        """Should ignore subdirectories when not recursive."""
        result = await pipeline.build_from_directory(temp_document_dir, recursive=False)
        assert "mongodb/basics.md" not in result.corpus.sources()

    @pytest.mark.asyncio
    async def test_deterministic_across_worker_counts(self, temp_document_dir: Path):
        """Should build the same corpus regardless of concurrency."""
        serial = IngestionPipeline(MarkdownLoader(), RecordExtractor(), max_workers=1)
        parallel = IngestionPipeline(MarkdownLoader(), RecordExtractor(), max_workers=8)

        first = await serial.build_from_directory(temp_document_dir)
        second = await parallel.build_from_directory(temp_document_dir)

        assert first.corpus.all() == second.corpus.all()

    @pytest.mark.asyncio
    async def test_missing_directory(self, pipeline, tmp_path: Path):
        """Should raise when the input directory does not exist."""
        with pytest.raises(SourceUnavailableError):
            await pipeline.build_from_directory(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_empty_directory(self, pipeline, tmp_path: Path):
        """Should build an empty corpus from an empty directory."""
        result = await pipeline.build_from_directory(tmp_path)

        assert len(result.corpus) == 0
        assert result.results == []

    @pytest.mark.asyncio
    async def test_sets_run_id(self, pipeline, tmp_path: Path):
        """Should bind a run ID for the build."""
        await pipeline.build_from_directory(tmp_path)
        assert get_run_id() is not None

    @pytest.mark.asyncio
    async def test_extractor_failure_is_isolated(self, temp_document_dir: Path):
        """Should record an unexpected extractor error and continue."""
        real = RecordExtractor()

        def extract_all(document: MarkdownDocument):
            if document.identifier == "express.md":
                raise RuntimeError("extractor crashed")
            return real.extract_all(document)

        extractor = Mock(spec=RecordExtractor)
        extractor.extract_all.side_effect = extract_all

        pipeline = IngestionPipeline(MarkdownLoader(), extractor)
        result = await pipeline.build_from_directory(temp_document_dir)

        express = next(r for r in result.results if r.identifier == "express.md")
        assert express.success is False
        assert express.loaded is True
        assert express.error == "extractor crashed"

        matches = [r for r in result.corpus.all() if r.normalized_question == SECURITY_KEY]
        assert matches[0].source_document == "nodejs.md"


class TestBuildFromTexts:
    """Test in-memory builds."""

    @pytest.mark.asyncio
    async def test_given_order_decides_duplicates(self, pipeline, nodejs_markdown: str, express_markdown: str):
        """Should insert texts in the order given."""
        result = await pipeline.build_from_texts({"nodejs": nodejs_markdown, "express": express_markdown})

        matches = [r for r in result.corpus.all() if r.normalized_question == SECURITY_KEY]
        assert [r.source_document for r in matches] == ["nodejs"]
        assert result.duplicates_discarded == 1

    @pytest.mark.asyncio
    async def test_pairs_and_empty_texts(self, pipeline):
        """Should accept pairs and skip empty texts."""
        result = await pipeline.build_from_texts([
            ("blank", "   "),
            ("one", "### 1. What is Node.js?\n\n**Answer:**\n\nA JavaScript runtime."),
        ])

        assert result.documents_skipped == 1
        assert result.documents_loaded == 1
        assert [r.question for r in result.corpus.all()] == ["What is Node.js?"]

    @pytest.mark.asyncio
    async def test_no_texts(self, pipeline):
        """Should build an empty, frozen corpus."""
        result = await pipeline.build_from_texts({})

        assert len(result.corpus) == 0
        assert result.corpus.frozen is True


class TestIngestDocument:
    """Test single document ingestion into an existing corpus."""

    def test_ingest_into_corpus(self, pipeline, nodejs_document: MarkdownDocument):
        """Should insert records and report counts."""
        corpus = Corpus()
        result = pipeline.ingest_document(corpus, nodejs_document)

        assert result.success is True
        assert result.records_inserted == 3
        assert len(corpus) == 3

    def test_ingest_twice_counts_duplicates(self, pipeline, nodejs_document: MarkdownDocument):
        """Should discard records already present."""
        corpus = Corpus()
        pipeline.ingest_document(corpus, nodejs_document)
        result = pipeline.ingest_document(corpus, nodejs_document)

        assert result.records_inserted == 0
        assert result.duplicates == 3

    def test_ingest_without_questions(self, pipeline):
        """Should report a document without questions."""
        document = MarkdownDocument(identifier="readme.md", text="# Readme\n\nNothing to ask.")
        result = pipeline.ingest_document(Corpus(), document)

        assert result.success is False
        assert result.loaded is True
        assert "No Q&A records extracted from readme.md" == result.error
