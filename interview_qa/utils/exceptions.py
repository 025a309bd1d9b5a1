"""
Custom exception hierarchy for the interview Q&A corpus builder.

This module defines the exceptions raised while loading Markdown documents,
extracting question/answer records, building the corpus index and exporting
it. Recoverable conditions (an empty document, a document without questions)
are modelled as exceptions too so the pipeline can log and skip them in one
place.
"""

from typing import Any, Dict, Optional


class CorpusError(Exception):
    """
    Base exception for all corpus builder errors.

    All custom exceptions in the corpus builder inherit from this base class,
    which allows callers to catch every domain error with a single clause.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
        cause: Optional underlying exception that caused this error
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize corpus exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
            cause: Optional underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """Return string representation of the exception."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message

    def __repr__(self) -> str:
        """Return detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"cause={self.cause!r})"
        )


# =============================================================================
# Document Ingestion Errors
# =============================================================================

class DocumentIngestionError(CorpusError):
    """
    Error during document ingestion.

    Parent of every error raised while loading a document or extracting
    records from it.
    """
    pass


class SourceUnavailableError(DocumentIngestionError):
    """
    The named input cannot be read at all.

    Raised when the input directory or file does not exist, is not the
    expected kind of path, or cannot be listed/opened. Fatal for a run.
    """
    pass


class DocumentLoadError(DocumentIngestionError):
    """
    Error loading a single document.

    Raised for unsupported formats or files over the configured size limit.
    """
    pass


class DocumentParseError(DocumentIngestionError):
    """
    Error decoding document content.

    Raised when none of the configured encodings can decode the file.
    """
    pass


class EmptyDocumentError(DocumentIngestionError):
    """
    Document has no content.

    Warning-level: the document is skipped and the run continues.
    """
    pass


class NoRecordsExtractedError(DocumentIngestionError):
    """
    Document yielded zero question/answer records.

    Warning-level: logged and counted, never fatal.
    """
    pass


# =============================================================================
# Corpus Index Errors
# =============================================================================

class CorpusIndexError(CorpusError):
    """Error with corpus index operations."""
    pass


class CorpusFrozenError(CorpusIndexError):
    """
    Insert attempted on a frozen corpus.

    A corpus is read-only once its load pass has finished; content changes
    require building a new one.
    """
    pass


# =============================================================================
# Export Errors
# =============================================================================

class ExportError(CorpusError):
    """
    Error serializing or deserializing a corpus.

    Raised when the output file cannot be written, or an exported file
    cannot be read back.
    """
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(CorpusError):
    """
    Error in system configuration.

    Raised when configuration is invalid, missing, or inconsistent.
    """
    pass


class InvalidConfigurationError(ConfigurationError):
    """
    Configuration value is invalid.

    Raised when a configuration parameter has an invalid value.
    """
    pass


# =============================================================================
# Utility Functions
# =============================================================================

RECOVERABLE_ERRORS = (
    EmptyDocumentError,
    NoRecordsExtractedError,
    DocumentLoadError,
    DocumentParseError,
)


def is_recoverable(exception: Exception) -> bool:
    """
    Check whether an error only affects a single document.

    Args:
        exception: Exception instance

    Returns:
        True if the run can skip the document and continue.
    """
    return isinstance(exception, RECOVERABLE_ERRORS)


def get_exit_code(exception: Exception) -> int:
    """
    Map exception to a process exit code for the CLI.

    Args:
        exception: Exception instance

    Returns:
        Exit code (1-3); 1 for unknown exceptions
    """
    # Most specific classes first
    exit_map = {
        SourceUnavailableError: 1,
        ExportError: 1,
        ConfigurationError: 2,
        CorpusIndexError: 3,
        CorpusError: 1,
    }

    for exc_type, exit_code in exit_map.items():
        if isinstance(exception, exc_type):
            return exit_code

    return 1


__all__ = [
    # Base exception
    "CorpusError",
    # Document ingestion
    "DocumentIngestionError",
    "SourceUnavailableError",
    "DocumentLoadError",
    "DocumentParseError",
    "EmptyDocumentError",
    "NoRecordsExtractedError",
    # Corpus index
    "CorpusIndexError",
    "CorpusFrozenError",
    # Export
    "ExportError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigurationError",
    # Utilities
    "RECOVERABLE_ERRORS",
    "is_recoverable",
    "get_exit_code",
]
