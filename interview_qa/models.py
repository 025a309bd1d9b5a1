"""
Domain models for the interview Q&A corpus builder.

Documents, code fragments and Q&A records are immutable Pydantic models.
Field aliases are camelCase so that `model_dump(by_alias=True)` produces the
export shape consumed by quiz front ends.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

import markdown
from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_WHITESPACE_RE = re.compile(r"\s+")
_NUMBERING_RE = re.compile(
    r"^(?:(?:q|question)\s*\d*|\d+)\s*[.):\-]\s+",
    re.IGNORECASE,
)
_TRAILING_PUNCTUATION_RE = re.compile(r"[\s?？.:!]+$")


def normalize_question(text: str) -> str:
    """
    Build the deduplication key for a question.

    Lower-cases the text and collapses runs of whitespace. A leading
    numbering prefix ("1.", "Q3:") and trailing punctuation are dropped so
    that the same question numbered differently in two documents maps to
    one key.

    Example:
        >>> normalize_question("  3.  How do you ensure API   security?")
        'how do you ensure api security'
    """
    collapsed = _WHITESPACE_RE.sub(" ", text).strip().lower()
    key = _NUMBERING_RE.sub("", collapsed)
    key = _TRAILING_PUNCTUATION_RE.sub("", key)
    return key or collapsed


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class MarkdownDocument(_FrozenModel):
    """
    A raw Markdown document as read from its source.

    Attributes:
        identifier: Stable identifier, e.g. the path relative to the input directory
        text: Raw document text
        source_format: Always "markdown" for this corpus
        metadata: Loader metadata (source path, file name, encoding)
    """

    identifier: str = Field(..., min_length=1)
    text: str
    source_format: str = "markdown"
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def line_count(self) -> int:
        return len(self.text.splitlines())


class CodeFragment(_FrozenModel):
    """
    A fenced code block embedded in a record.

    Attributes:
        language: Language tag from the fence info string, if any
        code: Literal text between the fences
        terminated: False when the fence was never closed
    """

    language: Optional[str] = None
    code: str
    terminated: bool = True


class QARecord(_FrozenModel):
    """
    One question/answer unit extracted from a document.

    Attributes:
        question: Question text from the heading (never empty)
        explanation: Text under an "Explanation:" or "Interviewer:" marker
        answer: Answer body; code fences are kept verbatim as opaque text
        code_fragments: Fenced code blocks in source order
        source_document: Identifier of the originating document
        number: Number from an "N." heading prefix, if present
        section: Nearest enclosing non-question heading, if any
        position: 0-based index of the record within its document
        line_number: 1-based line of the question heading
    """

    question: str
    explanation: Optional[str] = None
    answer: str = ""
    code_fragments: Tuple[CodeFragment, ...] = ()
    source_document: str
    number: Optional[int] = None
    section: Optional[str] = None
    position: int = Field(default=0, ge=0)
    line_number: int = Field(default=1, ge=1)

    @field_validator("question")
    @classmethod
    def validate_question(cls, v: str) -> str:
        """Question text must not be empty or whitespace only."""
        if not v.strip():
            raise ValueError("Question cannot be empty or whitespace only")
        return v.strip()

    @property
    def normalized_question(self) -> str:
        """Deduplication key for this record."""
        return normalize_question(self.question)

    @property
    def has_answer(self) -> bool:
        return bool(self.answer.strip())

    def answer_html(self) -> str:
        """Render the answer body to HTML."""
        return markdown.markdown(self.answer, extensions=["extra", "sane_lists"])

    def to_document(self) -> Document:
        """
        Convert the record to a LangChain Document.

        The page content holds the question and answer; the remaining fields
        are carried as metadata so the record can be fed to a retrieval
        pipeline unchanged.
        """
        parts = [f"Q: {self.question}"]
        if self.explanation:
            parts.append(self.explanation)
        parts.append(f"A: {self.answer}")

        metadata = {
            "source": self.source_document,
            "question": self.question,
            "position": self.position,
            "line_number": self.line_number,
            "num_code_fragments": len(self.code_fragments),
        }
        if self.section is not None:
            metadata["section"] = self.section
        if self.number is not None:
            metadata["number"] = self.number

        return Document(page_content="\n\n".join(parts), metadata=metadata)
