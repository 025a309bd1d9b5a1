"""
Markdown document loader.

Reads interview documents from a directory, a single file or an in-memory
collection of texts and turns them into immutable MarkdownDocument values.
Directory listings are sorted by identifier so repeated runs see documents in
the same order.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Tuple

from interview_qa.models import MarkdownDocument
from interview_qa.utils.exceptions import (
    DocumentIngestionError,
    DocumentLoadError,
    DocumentParseError,
    EmptyDocumentError,
    SourceUnavailableError,
)
from interview_qa.utils.logging import LoggerMixin

DEFAULT_ENCODINGS = ("utf-8", "latin-1", "cp1252")


class MarkdownLoader(LoggerMixin):
    """
    Loader for Markdown interview documents.

    Supported formats:
    - Markdown (.md, .markdown)

    Args:
        encodings: Encodings tried in order when decoding a file.
        max_file_size_mb: Files larger than this are rejected.

    Example:
        >>> loader = MarkdownLoader()
        >>> document = loader.load("docs/nodejs.md")
        >>> document.identifier
        'nodejs.md'
    """

    SUPPORTED_FORMATS = {".md", ".markdown"}

    def __init__(
        self,
        encodings: Iterable[str] = DEFAULT_ENCODINGS,
        max_file_size_mb: int = 10,
    ) -> None:
        super().__init__()

        self.encodings = list(encodings)
        self.max_file_size_mb = max_file_size_mb

        self.logger.debug(
            "MarkdownLoader initialized",
            encodings=self.encodings,
            max_file_size_mb=max_file_size_mb,
        )

    def is_supported(self, file_path: Path) -> bool:
        """
        Check if the file format is supported.

        Example:
            >>> MarkdownLoader().is_supported(Path("express.MD"))
            True
        """
        return file_path.suffix.lower() in self.SUPPORTED_FORMATS

    def load(self, file_path: str | Path, identifier: str | None = None) -> MarkdownDocument:
        """
        Load a single Markdown file.

        Args:
            file_path: Path to the document file.
            identifier: Identifier for the document (default: the file name).

        Returns:
            The loaded document.

        Raises:
            SourceUnavailableError: If the file does not exist or cannot be read.
            DocumentLoadError: If the format is unsupported or the file is too large.
            DocumentParseError: If no configured encoding can decode the file.
            EmptyDocumentError: If the file has no content.
        """
        path = Path(file_path)
        doc_id = identifier or path.name

        if not path.is_file():
            self.logger.error("File not found", file_path=str(path))
            raise SourceUnavailableError(
                f"File not found: {path}",
                details={"file_path": str(path)},
            )

        if not self.is_supported(path):
            raise DocumentLoadError(
                f"Unsupported file format: {path.suffix}. "
                f"Supported formats: {', '.join(sorted(self.SUPPORTED_FORMATS))}",
                details={"file_path": str(path)},
            )

        try:
            raw = path.read_bytes()
        except OSError as e:
            self.logger.error("Failed to read file", file_path=str(path), error=str(e))
            raise SourceUnavailableError(
                f"Cannot read file: {path}",
                details={"file_path": str(path)},
                cause=e,
            ) from e

        max_bytes = self.max_file_size_mb * 1024 * 1024
        if len(raw) > max_bytes:
            raise DocumentLoadError(
                f"File exceeds {self.max_file_size_mb} MB: {path}",
                details={"file_path": str(path), "size_bytes": len(raw)},
            )

        text, encoding_used = self._decode(raw, path)

        metadata = {
            "source": str(path),
            "file_name": path.name,
            "file_type": "markdown",
            "encoding": encoding_used,
        }

        document = self._make_document(doc_id, text, metadata)

        self.logger.debug(
            "Markdown file loaded",
            identifier=doc_id,
            encoding=encoding_used,
            content_length=len(text),
        )

        return document

    def discover(
        self,
        directory_path: str | Path,
        recursive: bool = True,
        pattern: str = "*",
    ) -> List[Tuple[str, Path]]:
        """
        Find supported documents in a directory.

        Args:
            directory_path: Path to the directory.
            recursive: Whether to search subdirectories.
            pattern: Glob pattern for filtering files.

        Returns:
            (identifier, path) pairs sorted by identifier; the identifier is
            the POSIX path relative to the directory.

        Raises:
            SourceUnavailableError: If the directory is missing or unreadable.
        """
        directory = Path(directory_path)

        if not directory.exists():
            self.logger.error("Directory not found", directory=str(directory))
            raise SourceUnavailableError(
                f"Directory not found: {directory}",
                details={"directory": str(directory)},
            )

        if not directory.is_dir():
            self.logger.error("Path is not a directory", path=str(directory))
            raise SourceUnavailableError(
                f"Path is not a directory: {directory}",
                details={"directory": str(directory)},
            )

        try:
            candidates = directory.rglob(pattern) if recursive else directory.glob(pattern)
            found = [
                (path.relative_to(directory).as_posix(), path)
                for path in candidates
                if path.is_file() and self.is_supported(path)
            ]
        except OSError as e:
            self.logger.error("Cannot list directory", directory=str(directory), error=str(e))
            raise SourceUnavailableError(
                f"Cannot list directory: {directory}",
                details={"directory": str(directory)},
                cause=e,
            ) from e

        found.sort(key=lambda item: item[0])

        self.logger.info(
            "Found supported files",
            directory=str(directory),
            supported_files=len(found),
            recursive=recursive,
            pattern=pattern,
        )

        return found

    def load_directory(
        self,
        directory_path: str | Path,
        recursive: bool = True,
        pattern: str = "*",
    ) -> List[MarkdownDocument]:
        """
        Load every supported document in a directory.

        Documents that fail to load (empty, undecodable, removed since the
        listing) are skipped with a warning; an unreadable directory is fatal.
        """
        documents = []
        for identifier, path in self.discover(directory_path, recursive, pattern):
            try:
                documents.append(self.load(path, identifier=identifier))
            except DocumentIngestionError as e:
                self.logger.warning("Skipping document", identifier=identifier, reason=str(e))
        return documents

    def load_texts(
        self,
        items: Mapping[str, str] | Iterable[Tuple[str, str]],
    ) -> List[MarkdownDocument]:
        """
        Build documents from in-memory texts.

        Args:
            items: Mapping or iterable of (identifier, text) pairs.

        Returns:
            Documents in the order given; empty texts and blank identifiers
            are skipped.
        """
        pairs = items.items() if isinstance(items, Mapping) else items

        documents = []
        for identifier, text in pairs:
            try:
                documents.append(self.from_text(identifier, text))
            except DocumentIngestionError as e:
                self.logger.warning("Skipping document", identifier=identifier, reason=str(e))
        return documents

    def from_text(self, identifier: str, text: str) -> MarkdownDocument:
        """
        Wrap one in-memory text as a document.

        Raises:
            DocumentLoadError: If the identifier is blank.
            EmptyDocumentError: If the text is empty or whitespace only.
        """
        return self._make_document(identifier, text, {"source": identifier, "file_type": "markdown"})

    def _make_document(self, identifier: str, text: str, metadata: dict) -> MarkdownDocument:
        if not identifier or not identifier.strip():
            raise DocumentLoadError(
                "Document identifier cannot be empty",
                details={"identifier": identifier},
            )
        if not text.strip():
            raise EmptyDocumentError(
                f"Document is empty: {identifier}",
                details={"identifier": identifier},
            )
        return MarkdownDocument(identifier=identifier, text=text, metadata=metadata)

    def _decode(self, raw: bytes, path: Path) -> Tuple[str, str]:
        for encoding in self.encodings:
            try:
                return raw.decode(encoding), encoding
            except (UnicodeDecodeError, LookupError):
                continue

        self.logger.error(
            "Failed to decode markdown file with any encoding",
            file_path=str(path),
            encodings_tried=self.encodings,
        )
        raise DocumentParseError(
            f"Could not decode file {path} with encodings: {self.encodings}",
            details={"file_path": str(path)},
        )


def load_document(file_path: str | Path) -> MarkdownDocument:
    """
    Convenience function to load a single document with default settings.

    Example:
        >>> from interview_qa.ingestion.loader import load_document
        >>> load_document("docs/mongodb.md").source_format
        'markdown'
    """
    return MarkdownLoader().load(file_path)
