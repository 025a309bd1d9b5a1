"""
Interview Q&A corpus builder.

Loads Markdown interview-preparation documents, extracts question/answer
records and aggregates them into a deduplicated, searchable corpus that can
be exported as JSON.
"""

from interview_qa.corpus.index import Corpus
from interview_qa.ingestion.extractor import RecordExtractor
from interview_qa.ingestion.loader import MarkdownLoader
from interview_qa.ingestion.pipeline import BuildResult, IngestionPipeline
from interview_qa.models import CodeFragment, MarkdownDocument, QARecord, normalize_question

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "CodeFragment",
    "Corpus",
    "IngestionPipeline",
    "MarkdownDocument",
    "MarkdownLoader",
    "QARecord",
    "RecordExtractor",
    "normalize_question",
]
