"""
Ingestion pipeline for the interview Q&A corpus.

This module orchestrates a complete build pass:
1. Discover and load Markdown documents
2. Extract Q&A records from each document
3. Insert records into a Corpus (first write wins)
4. Freeze the corpus and report a summary

Loading and extraction run per document on worker threads; insertion happens
afterwards in load order on the calling task, so the corpus has a single
writer and deduplication follows load order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Tuple

from interview_qa.corpus.index import Corpus
from interview_qa.ingestion.extractor import RecordExtractor
from interview_qa.ingestion.loader import MarkdownLoader
from interview_qa.models import MarkdownDocument, QARecord
from interview_qa.utils.exceptions import NoRecordsExtractedError, is_recoverable
from interview_qa.utils.logging import LoggerMixin, set_run_id


@dataclass
class DocumentResult:
    """
    Result of ingesting one document.

    Attributes:
        identifier: Document identifier.
        success: Whether the document contributed records.
        loaded: Whether the document was read, even if it held no questions.
        records_extracted: Records the extractor produced.
        records_inserted: Records that made it into the corpus.
        duplicates: Records discarded as duplicates.
        error: Reason the document was skipped (None if successful).
    """
    identifier: str
    success: bool
    loaded: bool = False
    records_extracted: int = 0
    records_inserted: int = 0
    duplicates: int = 0
    error: str | None = None

    def __str__(self) -> str:
        """Human-readable string representation."""
        if self.success:
            return (
                f"✓ {self.identifier}: "
                f"{self.records_extracted} extracted → "
                f"{self.records_inserted} inserted, "
                f"{self.duplicates} duplicates"
            )
        return f"✗ {self.identifier}: {self.error}"


@dataclass
class BuildResult:
    """
    Result of a complete build pass.

    Attributes:
        corpus: The frozen corpus.
        results: One DocumentResult per document, in load order.
    """
    corpus: Corpus
    results: List[DocumentResult] = field(default_factory=list)

    @property
    def documents_loaded(self) -> int:
        return sum(1 for r in self.results if r.loaded)

    @property
    def documents_skipped(self) -> int:
        return sum(1 for r in self.results if not r.loaded)

    @property
    def records_extracted(self) -> int:
        return sum(r.records_extracted for r in self.results)

    @property
    def records_inserted(self) -> int:
        return sum(r.records_inserted for r in self.results)

    @property
    def duplicates_discarded(self) -> int:
        return sum(r.duplicates for r in self.results)

    def summary(self) -> dict:
        """Counts reported to the user at the end of a run."""
        return {
            "documents_found": len(self.results),
            "documents_loaded": self.documents_loaded,
            "documents_skipped": self.documents_skipped,
            "records_extracted": self.records_extracted,
            "records_inserted": self.records_inserted,
            "duplicates_discarded": self.duplicates_discarded,
        }

    def __str__(self) -> str:
        s = self.summary()
        return (
            f"{s['documents_loaded']} documents loaded, "
            f"{s['records_extracted']} records extracted, "
            f"{s['duplicates_discarded']} duplicates discarded, "
            f"{s['documents_skipped']} documents skipped"
        )


@dataclass
class _Extraction:
    identifier: str
    loaded: bool = False
    records: List[QARecord] = field(default_factory=list)
    error: Exception | None = None


class IngestionPipeline(LoggerMixin):
    """
    Complete corpus build pipeline.

    Args:
        loader: Loader for Markdown documents.
        extractor: Record extractor.
        max_workers: Documents loaded and extracted concurrently.

    Example:
        >>> pipeline = IngestionPipeline(MarkdownLoader(), RecordExtractor())
        >>> result = await pipeline.build_from_directory("interview-docs/")
        >>> print(result)
        4 documents loaded, 120 records extracted, 3 duplicates discarded, 0 documents skipped
    """

    def __init__(
        self,
        loader: MarkdownLoader,
        extractor: RecordExtractor,
        max_workers: int = 4,
    ) -> None:
        super().__init__()

        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.loader = loader
        self.extractor = extractor
        self.max_workers = max_workers

        self.logger.debug("IngestionPipeline initialized", max_workers=max_workers)

    async def build_from_directory(
        self,
        directory_path: str | Path,
        recursive: bool = True,
        pattern: str = "*",
    ) -> BuildResult:
        """
        Build a corpus from every supported document in a directory.

        Args:
            directory_path: Input directory.
            recursive: Whether to search subdirectories.
            pattern: Glob pattern for filtering files.

        Returns:
            BuildResult with the frozen corpus and per-document results.

        Raises:
            SourceUnavailableError: If the directory cannot be read.
        """
        run_id = set_run_id()
        directory = Path(directory_path)

        self.logger.info("Starting corpus build", directory=str(directory), run_id=run_id)

        found = self.loader.discover(directory, recursive=recursive, pattern=pattern)
        if not found:
            self.logger.warning("No supported files found in directory", directory=str(directory))

        semaphore = asyncio.Semaphore(self.max_workers)
        extractions = await asyncio.gather(
            *(self._load_and_extract(identifier, path, semaphore) for identifier, path in found)
        )

        return self._assemble(extractions)

    async def build_from_texts(
        self,
        items: Mapping[str, str] | Iterable[Tuple[str, str]],
    ) -> BuildResult:
        """
        Build a corpus from in-memory (identifier, text) pairs.

        Empty texts are skipped by the loader; the remaining documents are
        inserted in the order given.
        """
        run_id = set_run_id()
        pairs = list(items.items() if isinstance(items, Mapping) else items)

        self.logger.info("Starting corpus build", num_texts=len(pairs), run_id=run_id)

        semaphore = asyncio.Semaphore(self.max_workers)
        extractions = await asyncio.gather(
            *(self._wrap_and_extract(identifier, text, semaphore) for identifier, text in pairs)
        )

        return self._assemble(extractions)

    def ingest_document(self, corpus: Corpus, document: MarkdownDocument) -> DocumentResult:
        """
        Extract records from one document and insert them into a corpus.

        Per-document failures are reported in the result rather than raised.
        """
        try:
            records = self.extractor.extract_all(document)
        except Exception as e:
            self.logger.error(
                "Extraction failed",
                identifier=document.identifier,
                error=str(e),
                exc_info=True,
            )
            return DocumentResult(
                identifier=document.identifier,
                success=False,
                loaded=True,
                error=str(e),
            )

        return self._insert(corpus, _Extraction(document.identifier, loaded=True, records=records))

    async def _load_and_extract(
        self,
        identifier: str,
        path: Path,
        semaphore: asyncio.Semaphore,
    ) -> _Extraction:
        async with semaphore:
            try:
                document = await asyncio.to_thread(self.loader.load, path, identifier)
            except Exception as e:
                return _Extraction(identifier, error=e)
            return await self._extract(document)

    async def _wrap_and_extract(
        self,
        identifier: str,
        text: str,
        semaphore: asyncio.Semaphore,
    ) -> _Extraction:
        async with semaphore:
            try:
                document = self.loader.from_text(identifier, text)
            except Exception as e:
                return _Extraction(identifier, error=e)
            return await self._extract(document)

    async def _extract(self, document: MarkdownDocument) -> _Extraction:
        try:
            records = await asyncio.to_thread(self.extractor.extract_all, document)
        except Exception as e:
            return _Extraction(document.identifier, loaded=True, error=e)
        return _Extraction(document.identifier, loaded=True, records=records)

    def _assemble(self, extractions: Iterable[_Extraction]) -> BuildResult:
        corpus = Corpus()
        results = [self._insert(corpus, extraction) for extraction in extractions]
        corpus.freeze()

        result = BuildResult(corpus=corpus, results=results)
        self.logger.info("Corpus build complete", **result.summary())
        return result

    def _insert(self, corpus: Corpus, extraction: _Extraction) -> DocumentResult:
        identifier = extraction.identifier

        if extraction.error is not None:
            error = extraction.error
            if is_recoverable(error):
                self.logger.warning("Skipping document", identifier=identifier, reason=str(error))
            else:
                self.logger.error(
                    "Document ingestion failed",
                    identifier=identifier,
                    error=str(error),
                    error_type=type(error).__name__,
                )
            return DocumentResult(
                identifier=identifier,
                success=False,
                loaded=extraction.loaded,
                error=str(error),
            )

        if not extraction.records:
            error = NoRecordsExtractedError(
                f"No Q&A records extracted from {identifier}",
                details={"identifier": identifier},
            )
            self.logger.warning("No records extracted", identifier=identifier)
            return DocumentResult(
                identifier=identifier,
                success=False,
                loaded=True,
                error=error.message,
            )

        inserted = sum(1 for record in extraction.records if corpus.insert(record))

        result = DocumentResult(
            identifier=identifier,
            success=True,
            loaded=True,
            records_extracted=len(extraction.records),
            records_inserted=inserted,
            duplicates=len(extraction.records) - inserted,
        )
        self.logger.debug("Document ingested", identifier=identifier, result=str(result))
        return result
