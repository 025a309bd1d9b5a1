"""
In-memory corpus index of Q&A records.

Records are keyed by their normalized question. The first record inserted
for a key wins; later duplicates are counted and discarded. Inserts are
serialized by a lock (single writer); reads take a snapshot of the records
and never block on each other.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, Iterable, Iterator, List, Optional

from langchain_core.documents import Document

from interview_qa.models import QARecord, normalize_question
from interview_qa.utils.exceptions import CorpusFrozenError
from interview_qa.utils.logging import LoggerMixin


class Corpus(LoggerMixin):
    """
    Insertion-ordered, deduplicated collection of Q&A records.

    Example:
        >>> corpus = Corpus()
        >>> corpus.insert(record)
        True
        >>> corpus.insert(same_question_from_another_file)
        False
        >>> [r.question for r in corpus.by_topic("node")]
        ['What is Node.js?']
    """

    def __init__(self, records: Iterable[QARecord] = ()) -> None:
        super().__init__()

        self._records: Dict[str, QARecord] = {}
        self._lock = threading.Lock()
        self._frozen = False
        self.duplicates_discarded = 0
        self.flagged: List[QARecord] = []

        for record in records:
            self.insert(record)

    def insert(self, record: QARecord) -> bool:
        """
        Add a record unless its normalized question is already present.

        Records with a blank answer are inserted but flagged.

        Args:
            record: Record to add.

        Returns:
            True if the record was inserted, False if it was a duplicate.

        Raises:
            CorpusFrozenError: If the corpus has been frozen.
        """
        key = record.normalized_question

        with self._lock:
            if self._frozen:
                raise CorpusFrozenError(
                    "Corpus is frozen; build a new one to change its content",
                    details={"question": record.question},
                )

            if key in self._records:
                self.duplicates_discarded += 1
                self.logger.debug(
                    "Duplicate question discarded",
                    question=record.question,
                    source=record.source_document,
                    kept_source=self._records[key].source_document,
                )
                return False

            self._records[key] = record

            if not record.has_answer:
                self.flagged.append(record)
                self.logger.warning(
                    "Record has an empty answer",
                    question=record.question,
                    source=record.source_document,
                )

        return True

    def by_topic(self, keyword: str) -> Iterator[QARecord]:
        """
        Lazily yield records whose question or answer contains a keyword.

        Matching is a case-insensitive substring match.

        Args:
            keyword: Text to look for.

        Yields:
            Matching records in insertion order.
        """
        needle = keyword.lower()
        for record in self.all():
            if needle in record.question.lower() or needle in record.answer.lower():
                yield record

    def all(self) -> List[QARecord]:
        """Return all records in insertion order."""
        with self._lock:
            return list(self._records.values())

    def get(self, question: str) -> Optional[QARecord]:
        """Look up a record by question text (normalized before lookup)."""
        return self._records.get(normalize_question(question))

    def by_source(self, identifier: str) -> List[QARecord]:
        """Return the records that came from one document."""
        return [r for r in self.all() if r.source_document == identifier]

    def sources(self) -> List[str]:
        """Return source document identifiers in first-seen order."""
        return list(dict.fromkeys(r.source_document for r in self.all()))

    def freeze(self) -> None:
        """Make the corpus read-only."""
        with self._lock:
            self._frozen = True
        self.logger.debug("Corpus frozen", num_records=len(self._records))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def as_documents(self) -> List[Document]:
        """Convert all records to LangChain Documents."""
        return [record.to_document() for record in self.all()]

    def stats(self) -> dict:
        """
        Summary statistics for the corpus.

        Example:
            >>> corpus.stats()["total_records"]
            42
        """
        records = self.all()
        per_source = Counter(r.source_document for r in records)

        return {
            "total_records": len(records),
            "duplicates_discarded": self.duplicates_discarded,
            "flagged_empty_answers": len(self.flagged),
            "num_sources": len(per_source),
            "records_per_source": dict(per_source),
            "num_code_fragments": sum(len(r.code_fragments) for r in records),
        }

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[QARecord]:
        return iter(self.all())

    def __contains__(self, question: object) -> bool:
        if isinstance(question, QARecord):
            return question.normalized_question in self._records
        if isinstance(question, str):
            return normalize_question(question) in self._records
        return False

    def __repr__(self) -> str:
        return f"Corpus(records={len(self)}, duplicates_discarded={self.duplicates_discarded})"
