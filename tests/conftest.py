"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides the Cypress reporter fixtures shared by several test packages.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local testrunner_mcp package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of testrunner_mcp modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("testrunner_mcp"):
        del sys.modules[module_name]


NOISE = (
    "Warning: The following browser launch options were provided but are not "
    "supported by electron\n\n - args\n"
    "[3977:0915/103024.520574:ERROR:dbus/bus.cc:408] Failed to connect to the bus: "
    "Address does not contain a colon\n"
)


def _test_record(title: str, *, err: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "title": title,
        "fullTitle": f"Login {title}",
        "file": None,
        "duration": 1000,
        "currentRetry": 0,
        "err": err if err is not None else {},
    }


@pytest.fixture
def failing_error() -> dict[str, Any]:
    return {
        "message": "Test error message",
        "name": "CypressError",
        "codeFrame": {
            "line": 23,
            "column": 47,
            "originalFile": "test.cy.js",
            "relativeFile": "test.cy.js",
            "absoluteFile": "/path/test.cy.js",
            "frame": "test code frame",
            "language": "js",
        },
    }


@pytest.fixture
def report(failing_error: dict[str, Any]) -> dict[str, Any]:
    """A reporter document with one failing and one passing test."""
    failing = _test_record("rejects bad password", err=failing_error)
    passing = _test_record("accepts good password")
    return {
        "stats": {
            "suites": 1,
            "tests": 2,
            "passes": 1,
            "pending": 0,
            "failures": 1,
            "start": "2025-09-15T10:30:26.416Z",
            "end": "2025-09-15T10:30:40.850Z",
            "duration": 14434,
        },
        "tests": [failing, passing],
        "pending": [],
        "failures": [failing],
        "passes": [passing],
    }


@pytest.fixture
def report_json(report: dict[str, Any]) -> str:
    return json.dumps(report, indent=2)


@pytest.fixture
def noisy_stdout(report_json: str) -> str:
    return NOISE + report_json
