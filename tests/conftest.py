"""
Pytest configuration and shared fixtures.

This module provides:
- Shared fixtures for all tests
- Hypothesis profile configuration
- Test environment setup
"""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
from hypothesis import settings as hypothesis_settings, Verbosity

from interview_qa.models import MarkdownDocument

# Configure Hypothesis profiles
hypothesis_settings.register_profile(
    "ci",
    max_examples=100,
    deadline=1000,
    verbosity=Verbosity.normal,
)
hypothesis_settings.register_profile(
    "dev",
    max_examples=20,
    deadline=None,
    verbosity=Verbosity.normal,
)

# Load profile from environment or use dev
profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
hypothesis_settings.load_profile(profile)


NODEJS_MD = """# Node.js Interview Questions

## Basics

### 1. What is Node.js?

**Answer:** Node.js is a JavaScript runtime built on Chrome's V8 engine.

It runs JavaScript outside the browser.

---

### 2. What is the event loop?

**Explanation:** The interviewer wants to know how Node handles concurrency.

**Answer:** The event loop processes callbacks from the task queues.

```js
setTimeout(() => console.log("later"), 0);
console.log("now");
```

---

## Security

### How do you ensure API security on the server-side?

**Answer:** Validate input, use HTTPS and rate limiting.
"""

EXPRESS_MD = """# Express.js

### 1. What is middleware in Express?

**Answer:** A function with access to req, res and next.

### 2. How do you ensure API security on the server-side?

**Answer:** Use helmet and input validation.
"""


@pytest.fixture
def nodejs_markdown() -> str:
    """Sample Node.js interview document."""
    return NODEJS_MD


@pytest.fixture
def express_markdown() -> str:
    """Sample Express.js interview document."""
    return EXPRESS_MD


@pytest.fixture
def nodejs_document() -> MarkdownDocument:
    """Node.js interview document as a MarkdownDocument."""
    return MarkdownDocument(identifier="nodejs.md", text=NODEJS_MD)


@pytest.fixture
def temp_document_dir(tmp_path: Path) -> Path:
    """Create a temporary directory with sample interview documents."""
    (tmp_path / "nodejs.md").write_text(NODEJS_MD, encoding="utf-8")
    (tmp_path / "express.md").write_text(EXPRESS_MD, encoding="utf-8")
    (tmp_path / "notes.txt").write_text("### Ignored?\n\nNot markdown.", encoding="utf-8")
    (tmp_path / "empty.md").write_text("", encoding="utf-8")
    (tmp_path / "readme.md").write_text("# Readme\n\nNo questions here.", encoding="utf-8")

    nested = tmp_path / "mongodb"
    nested.mkdir()
    (nested / "basics.md").write_text(
        "## What is a MongoDB replica set?\n\nA group of mongod processes holding the same data.\n",
        encoding="utf-8",
    )

    return tmp_path


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Fixture to set environment variables for testing."""
    env_vars = {
        "INGEST_PATTERN": "*.md",
        "INGEST_MAX_WORKERS": "2",
        "EXTRACT_NUMBERED_HEADINGS": "false",
        "EXPORT_FORMAT": "jsonl",
        "LOG_LEVEL": "DEBUG",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Reset the run ID between tests."""
    from interview_qa.utils.logging import clear_run_id

    clear_run_id()
    yield
    clear_run_id()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings from its own environment."""
    from interview_qa.config.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# Markers for test categorization
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
