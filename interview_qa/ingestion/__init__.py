"""
Ingestion module for the interview Q&A corpus.

This module provides:
- Markdown document loading from directories, files and in-memory texts
- Q&A record extraction
- Build pipeline orchestration
"""

from interview_qa.ingestion.extractor import RecordExtractor
from interview_qa.ingestion.loader import MarkdownLoader, load_document
from interview_qa.ingestion.pipeline import BuildResult, DocumentResult, IngestionPipeline

__all__ = [
    "MarkdownLoader",
    "load_document",
    "RecordExtractor",
    "IngestionPipeline",
    "BuildResult",
    "DocumentResult",
]
