"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Complete test environment that overrides every search setting
TEST_ENV = {
    "CLASSROOM_SEARCH_THRESHOLD": "0.4",
    "CLASSROOM_SEARCH_COMBINE": "best",
    "CLASSROOM_SEARCH_MAX_PATTERN_LENGTH": "32",
    "CLASSROOM_SEARCH_EDIT_WEIGHT": "1.0",
    "CLASSROOM_SEARCH_POSITION_WEIGHT": "0.1",
    "CLASSROOM_SEARCH_MAX_EDIT_RATIO": "0.5",
    "CLASSROOM_SEARCH_LOG_LEVEL": "info",
    "CLASSROOM_SEARCH_LOG_JSON": "true",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset search settings in the environment before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    # Keep a developer's .env out of the settings under test
    monkeypatch.chdir(Path(__file__).resolve().parent)


@pytest.fixture
def courses():
    """Course records as returned by the classroom API."""
    return [
        {"id": "c1", "name": "Intro to Biology", "courseState": "ACTIVE"},
        {"id": "c2", "name": "Advanced Chemistry", "courseState": "ACTIVE"},
        {"id": "c3", "name": "Biology Lab", "courseState": "ARCHIVED"},
    ]


@pytest.fixture
def assignments():
    """Course work records with title and description fields."""
    return [
        {"id": "a1", "title": "Essay draft", "description": "Write about cell biology"},
        {"id": "a2", "title": "Biology quiz", "description": "Chapter 3 review"},
        {"id": "a3", "title": "Lab report", "description": None},
        {"id": "a4", "title": "Reading"},
    ]
