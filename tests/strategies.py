"""
Custom Hypothesis strategies for property-based testing.

This module provides strategies for generating Markdown interview documents
and Q&A records for the corpus builder tests.
"""

from typing import Any

from hypothesis import strategies as st

from interview_qa.models import QARecord

# Plain prose: letters and spaces only, so no generated text is mistaken
# for a heading, a fence or a marker.
_WORD = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=10)


# =============================================================================
# Text Strategies
# =============================================================================

@st.composite
def sentence(draw: Any, min_words: int = 1, max_words: int = 8) -> str:
    """Generate a sentence of lower-case words."""
    words = draw(st.lists(_WORD, min_size=min_words, max_size=max_words))
    return " ".join(words)


@st.composite
def question_title(draw: Any) -> str:
    """
    Generate a question heading title ending with '?'.

    The first word is capitalized so titles look like real questions.
    """
    text = draw(sentence(min_words=2, max_words=8))
    return text[0].upper() + text[1:] + "?"


@st.composite
def keyword(draw: Any) -> str:
    """Generate a search keyword, sometimes with mixed case."""
    word = draw(_WORD)
    if draw(st.booleans()):
        word = word.upper()
    return word


# =============================================================================
# Document Strategies
# =============================================================================

@st.composite
def qa_pair(draw: Any) -> tuple[str, str]:
    """Generate a (question, answer) pair."""
    return draw(question_title()), draw(sentence(min_words=1, max_words=20))


@st.composite
def interview_markdown(draw: Any) -> str:
    """
    Generate an interview document with numbered question headings.

    Each question gets an "**Answer:**" marker, optionally followed by a
    fenced code block and a thematic break.
    """
    pairs = draw(st.lists(qa_pair(), min_size=0, max_size=6))
    level = draw(st.integers(min_value=2, max_value=4))

    elements = ["# " + draw(sentence(min_words=1, max_words=4)), ""]
    for index, (question, answer) in enumerate(pairs, start=1):
        elements.append(f"{'#' * level} {index}. {question}")
        elements.append("")
        elements.append(f"**Answer:** {answer}")
        elements.append("")
        if draw(st.booleans()):
            elements.extend(["```js", draw(sentence()), "```", ""])
        if draw(st.booleans()):
            elements.extend(["---", ""])

    return "\n".join(elements)


# =============================================================================
# Record Strategies
# =============================================================================

@st.composite
def qa_record(draw: Any, source_document: str | None = None) -> QARecord:
    """Generate a valid QARecord."""
    return QARecord(
        question=draw(question_title()),
        answer=draw(sentence(min_words=0, max_words=20)),
        source_document=source_document or draw(_WORD) + ".md",
        position=draw(st.integers(min_value=0, max_value=100)),
        line_number=draw(st.integers(min_value=1, max_value=1000)),
    )
