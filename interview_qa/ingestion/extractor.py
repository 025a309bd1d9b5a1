"""
Q&A record extractor for Markdown interview documents.

Scans a document line by line with a two-state machine:

- SEEKING: waiting for a question heading (a heading whose text ends in "?",
  or a numbered "N. Title" / "Q1: Title" heading).
- COLLECTING: accumulating lines into the pending record. Secondary markers
  such as "**Answer:**" or "Interviewer:" switch between the explanation and
  the answer. Fenced code blocks are opaque: their lines are copied verbatim
  and also collected as CodeFragment values.

A new question heading, a non-question heading shallower than the pending
question, or the end of the document closes the pending record. Headings at
the question's level or deeper stay in the answer. Text between a closing
topic heading and the next question belongs to no record and is reported
with a warning. The extractor never raises on malformed input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from interview_qa.models import CodeFragment, MarkdownDocument, QARecord
from interview_qa.utils.logging import LoggerMixin

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_FENCE_OPEN_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_FENCE_CLOSE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})[ \t]*$")
_THEMATIC_BREAK_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_NUMBERED_RE = re.compile(r"^(\d+)[.)][ \t]+(.+)$")
_Q_PREFIX_RE = re.compile(r"^(?:q|question)[ \t]*(\d+)?[ \t]*[.:)][ \t]*(.+)$", re.IGNORECASE)
_LINE_PREFIX_RE = re.compile(r"^[ \t]*(?:>[ \t]?)*(?:[-*+][ \t]+)?")
_MARKER_RE = re.compile(
    r"^[*_]{0,3}(explanation|answer|interviewer|candidate)"
    r"(?::[*_]{0,3}|[*_]{1,3}[ \t]*:)[ \t]*(.*)$",
    re.IGNORECASE,
)
_BARE_MARKER_RE = re.compile(
    r"^(explanation|answer|interviewer|candidate)[ \t]*:?$",
    re.IGNORECASE,
)
_QUESTION_MARKS = ("?", "？")


class ExtractorState(str, Enum):
    """Scanner state."""
    SEEKING = "seeking"
    COLLECTING = "collecting"


class Section(str, Enum):
    """Where collected text is placed."""
    EXPLANATION = "explanation"
    ANSWER = "answer"


MARKER_SECTIONS: Dict[str, Section] = {
    "explanation": Section.EXPLANATION,
    "interviewer": Section.EXPLANATION,
    "answer": Section.ANSWER,
    "candidate": Section.ANSWER,
}


def strip_emphasis(text: str) -> str:
    """
    Remove surrounding emphasis markers from heading text.

    Example:
        >>> strip_emphasis("**What is Node.js?**")
        'What is Node.js?'
    """
    text = text.strip()
    while len(text) >= 2 and text[0] in "*_" and text[-1] in "*_":
        text = text[1:-1].strip()
    return text


def parse_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return (level, text) for an ATX heading line, or None."""
    match = _HEADING_RE.match(line)
    if match is None:
        return None
    return len(match.group(1)), (match.group(2) or "").strip()


def match_marker(line: str, allow_bare: bool = False) -> Optional[Tuple[Section, str]]:
    """
    Detect a secondary marker at the start of a line.

    Leading blockquote and list prefixes are ignored. A colon is required
    unless `allow_bare` is set (used for headings such as "#### Answer").

    Returns:
        (section, remaining text on the line), or None.
    """
    body = line[_LINE_PREFIX_RE.match(line).end():]

    match = _MARKER_RE.match(body)
    if match is not None:
        return MARKER_SECTIONS[match.group(1).lower()], match.group(2).strip()

    if allow_bare:
        match = _BARE_MARKER_RE.match(strip_emphasis(body))
        if match is not None:
            return MARKER_SECTIONS[match.group(1).lower()], ""

    return None


@dataclass
class _OpenFence:
    char: str
    length: int
    language: Optional[str]
    lines: List[str] = field(default_factory=list)

    def closes(self, line: str) -> bool:
        match = _FENCE_CLOSE_RE.match(line)
        if match is None:
            return False
        run = match.group(1)
        return run[0] == self.char and len(run) >= self.length

    def fragment(self, terminated: bool) -> CodeFragment:
        return CodeFragment(
            language=self.language,
            code="\n".join(self.lines),
            terminated=terminated,
        )


def open_fence(line: str) -> Optional[_OpenFence]:
    """Return an open fence if the line starts a fenced code block."""
    match = _FENCE_OPEN_RE.match(line)
    if match is None:
        return None

    run, info = match.group(1), match.group(2).strip()
    # Backtick fences may not carry backticks in their info string
    if run[0] == "`" and "`" in info:
        return None

    language = info.split()[0].strip("{}.") if info else None
    return _OpenFence(char=run[0], length=len(run), language=language or None)


def _trim_body(lines: List[str]) -> str:
    # Whitespace-only bodies are kept verbatim
    if not any(line.strip() for line in lines):
        return "\n".join(lines)

    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and (not lines[end - 1].strip() or _THEMATIC_BREAK_RE.match(lines[end - 1])):
        end -= 1
    return "\n".join(lines[start:end])


@dataclass
class _PendingRecord:
    question: str
    number: Optional[int]
    level: int
    line_number: int
    section: Optional[str]
    target: Section = Section.ANSWER
    answer_lines: List[str] = field(default_factory=list)
    explanation_lines: Optional[List[str]] = None
    fragments: List[CodeFragment] = field(default_factory=list)

    def add(self, line: str) -> None:
        if self.target is Section.EXPLANATION:
            self.explanation_lines.append(line)
        else:
            self.answer_lines.append(line)

    def switch(self, target: Section) -> None:
        self.target = target
        if target is Section.EXPLANATION and self.explanation_lines is None:
            self.explanation_lines = []

    def build(self, source_document: str, position: int) -> QARecord:
        explanation = None
        if self.explanation_lines is not None and any(line.strip() for line in self.explanation_lines):
            explanation = _trim_body(self.explanation_lines)

        return QARecord(
            question=self.question,
            explanation=explanation,
            answer=_trim_body(self.answer_lines),
            code_fragments=tuple(self.fragments),
            source_document=source_document,
            number=self.number,
            section=self.section,
            position=position,
            line_number=self.line_number,
        )


class RecordExtractor(LoggerMixin):
    """
    Extracts ordered Q&A records from Markdown documents.

    Extraction is a pure function of the document text: calling `extract`
    twice on the same document yields equal records.

    Args:
        numbered_headings: Treat "N. Title" headings as questions even when
            the title does not end with "?".
        min_heading_level: Shallowest heading level considered for questions.
        max_heading_level: Deepest heading level considered for questions.

    Example:
        >>> extractor = RecordExtractor()
        >>> doc = MarkdownDocument(
        ...     identifier="nodejs.md",
        ...     text="### 1. What is Node.js?\\n**Answer:** A JavaScript runtime.",
        ... )
        >>> [r.question for r in extractor.extract(doc)]
        ['What is Node.js?']
    """

    def __init__(
        self,
        numbered_headings: bool = True,
        min_heading_level: int = 1,
        max_heading_level: int = 6,
    ) -> None:
        super().__init__()

        if min_heading_level > max_heading_level:
            raise ValueError(
                f"min_heading_level ({min_heading_level}) must not exceed "
                f"max_heading_level ({max_heading_level})"
            )

        self.numbered_headings = numbered_headings
        self.min_heading_level = min_heading_level
        self.max_heading_level = max_heading_level

    def parse_question(self, level: int, text: str) -> Optional[Tuple[str, Optional[int]]]:
        """
        Decide whether a heading introduces a question.

        Args:
            level: Heading level (1-6).
            text: Heading text without the leading '#' markers.

        Returns:
            (question text, number) for question headings, None otherwise.
        """
        if not self.min_heading_level <= level <= self.max_heading_level:
            return None

        text = strip_emphasis(text)
        number: Optional[int] = None
        prefixed = False

        match = _NUMBERED_RE.match(text)
        if match is not None:
            number, title = int(match.group(1)), strip_emphasis(match.group(2))
            prefixed = self.numbered_headings
        else:
            match = _Q_PREFIX_RE.match(text)
            if match is not None:
                number = int(match.group(1)) if match.group(1) else None
                title = strip_emphasis(match.group(2))
                prefixed = True
            else:
                title = text

        if not title:
            return None
        if prefixed or title.endswith(_QUESTION_MARKS):
            return title, number
        return None

    def extract(self, document: MarkdownDocument) -> Iterator[QARecord]:
        """
        Lazily extract Q&A records from a document.

        Args:
            document: Document to scan.

        Yields:
            Records in source order.
        """
        state = ExtractorState.SEEKING
        pending: Optional[_PendingRecord] = None
        fence: Optional[_OpenFence] = None
        topics: Dict[int, str] = {}
        position = 0
        # Line of the topic heading that closed the last record, and how many
        # content lines have been skipped since then
        closed_at: Optional[int] = None
        skipped = 0

        for line_number, line in enumerate(document.text.splitlines(), start=1):
            if fence is not None:
                if fence.closes(line):
                    if pending is not None:
                        pending.add(line)
                        pending.fragments.append(fence.fragment(terminated=True))
                    fence = None
                else:
                    fence.lines.append(line)
                    if pending is not None:
                        pending.add(line)
                if pending is None and closed_at is not None:
                    skipped += 1
                continue

            fence = open_fence(line)
            if fence is not None:
                if pending is not None:
                    pending.add(line)
                elif closed_at is not None:
                    skipped += 1
                continue

            heading = parse_heading(line)
            if heading is not None:
                level, text = heading
                question = self.parse_question(level, text)

                if question is not None:
                    if pending is not None:
                        yield pending.build(document.identifier, position)
                        position += 1
                    if skipped:
                        self._warn_skipped(document, closed_at, line_number - 1, skipped)
                    closed_at, skipped = None, 0
                    pending = _PendingRecord(
                        question=question[0],
                        number=question[1],
                        level=level,
                        line_number=line_number,
                        section=self._enclosing_topic(topics, level),
                    )
                    state = ExtractorState.COLLECTING
                    continue

                if state is ExtractorState.COLLECTING:
                    marker = match_marker(text, allow_bare=True)
                    if marker is not None:
                        pending.switch(marker[0])
                        if marker[1]:
                            pending.add(marker[1])
                        continue
                    if level >= pending.level:
                        pending.add(line)
                        continue
                    yield pending.build(document.identifier, position)
                    position += 1
                    pending = None
                    state = ExtractorState.SEEKING
                    closed_at = line_number

                topics = {lvl: t for lvl, t in topics.items() if lvl < level}
                title = strip_emphasis(text)
                if title:
                    topics[level] = title
                continue

            if state is ExtractorState.SEEKING:
                if closed_at is not None and line.strip():
                    skipped += 1
                continue

            marker = match_marker(line)
            if marker is not None:
                pending.switch(marker[0])
                if marker[1]:
                    pending.add(marker[1])
                continue

            pending.add(line)

        if fence is not None and pending is not None:
            pending.fragments.append(fence.fragment(terminated=False))
            self.logger.debug(
                "Unterminated code fence copied to end of document",
                identifier=document.identifier,
                question=pending.question,
            )

        if pending is not None:
            yield pending.build(document.identifier, position)
            position += 1

        if skipped:
            self._warn_skipped(document, closed_at, document.line_count, skipped)

        self.logger.debug(
            "Extraction complete",
            identifier=document.identifier,
            num_records=position,
        )

    def extract_all(self, document: MarkdownDocument) -> List[QARecord]:
        """Extract every record of a document into a list."""
        return list(self.extract(document))

    def extract_text(self, text: str, identifier: str = "<memory>") -> List[QARecord]:
        """
        Extract records from raw Markdown text.

        Example:
            >>> RecordExtractor().extract_text("No headings here")
            []
        """
        return self.extract_all(MarkdownDocument(identifier=identifier, text=text))

    @staticmethod
    def _enclosing_topic(topics: Dict[int, str], level: int) -> Optional[str]:
        candidates = [lvl for lvl in topics if lvl <= level]
        if not candidates:
            return None
        return topics[max(candidates)]

    def _warn_skipped(
        self,
        document: MarkdownDocument,
        first_line: int,
        last_line: int,
        num_lines: int,
    ) -> None:
        self.logger.warning(
            "Text under a topic heading is not part of any record",
            identifier=document.identifier,
            first_line=first_line,
            last_line=last_line,
            num_lines=num_lines,
        )
