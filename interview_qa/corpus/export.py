"""
JSON export and import of a corpus.

Two layouts are supported:
- "json": a single array of record objects
- "jsonl": one record object per line

Each object carries `question`, `explanation`, `answer`, `codeFragments` and
`sourceDocument`, plus `number`, `section`, `position` and `lineNumber`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Literal

from pydantic import ValidationError

from interview_qa.corpus.index import Corpus
from interview_qa.models import QARecord
from interview_qa.utils.exceptions import ExportError
from interview_qa.utils.logging import get_logger, log_function_call

ExportFormat = Literal["json", "jsonl"]

JSONL_SUFFIXES = {".jsonl", ".ndjson"}

logger = get_logger(__name__)


def record_to_dict(record: QARecord, include_html: bool = False) -> Dict[str, Any]:
    """
    Serialize one record to its export shape.

    Example:
        >>> record_to_dict(record)["sourceDocument"]
        'nodejs.md'
    """
    data = record.model_dump(mode="json", by_alias=True)
    if include_html:
        data["answerHtml"] = record.answer_html()
    return data


def corpus_to_json(
    corpus: Corpus,
    format: ExportFormat = "json",
    indent: int | None = 2,
    include_html: bool = False,
) -> str:
    """
    Serialize a corpus to a JSON string.

    Args:
        corpus: Corpus to serialize.
        format: "json" for an array, "jsonl" for one object per line.
        indent: Indentation for "json" output; ignored for "jsonl".
        include_html: Add the rendered answer as `answerHtml`.

    Returns:
        The serialized corpus.
    """
    items = [record_to_dict(r, include_html=include_html) for r in corpus.all()]

    if format == "jsonl":
        return "".join(json.dumps(item, ensure_ascii=False) + "\n" for item in items)
    if format == "json":
        return json.dumps(items, ensure_ascii=False, indent=indent) + "\n"
    raise ExportError(f"Unsupported export format: {format}", details={"format": format})


@log_function_call()
def dump_corpus(
    corpus: Corpus,
    output_path: str | Path,
    format: ExportFormat = "json",
    indent: int | None = 2,
    include_html: bool = False,
) -> Path:
    """
    Write a corpus to a file, creating parent directories as needed.

    Returns:
        The path written.

    Raises:
        ExportError: If the file cannot be written.
    """
    path = Path(output_path)
    payload = corpus_to_json(corpus, format=format, indent=indent, include_html=include_html)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload, encoding="utf-8")
    except OSError as e:
        raise ExportError(
            f"Cannot write corpus to {path}",
            details={"output_path": str(path)},
            cause=e,
        ) from e

    logger.info("Corpus exported", output_path=str(path), format=format, num_records=len(corpus))
    return path


def parse_records(payload: str, format: ExportFormat | None = None) -> List[QARecord]:
    """
    Parse exported JSON back into records.

    Args:
        payload: File content.
        format: Layout of the payload; detected from the content when None.

    Raises:
        ExportError: If the payload is not valid export data.
    """
    stripped = payload.lstrip()
    if format is None:
        format = "json" if stripped.startswith("[") or not stripped else "jsonl"

    try:
        if format == "json":
            items = json.loads(payload) if stripped else []
        else:
            items = [json.loads(line) for line in payload.splitlines() if line.strip()]
        if not isinstance(items, list):
            raise ExportError("Exported corpus must be a JSON array of records")
        return [QARecord.model_validate(item) for item in items]
    except (json.JSONDecodeError, ValidationError) as e:
        raise ExportError(f"Invalid corpus export: {e}", cause=e) from e


@log_function_call()
def load_corpus(input_path: str | Path) -> Corpus:
    """
    Read an exported corpus file back into a frozen Corpus.

    The layout is taken from the suffix (.jsonl/.ndjson) or detected from
    the content.

    Raises:
        ExportError: If the file cannot be read or parsed.
    """
    path = Path(input_path)

    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ExportError(
            f"Cannot read corpus from {path}",
            details={"input_path": str(path)},
            cause=e,
        ) from e

    format: ExportFormat | None = "jsonl" if path.suffix.lower() in JSONL_SUFFIXES else None
    corpus = Corpus(parse_records(payload, format=format))
    corpus.freeze()
    return corpus
