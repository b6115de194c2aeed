"""Pytest configuration and fixtures for test suite.

This is the root-level conftest.py that provides:
- Python path setup (so we can import ecoscore without installing)
- Basic environment variable defaults
- A small category catalog shared by the unit tests
"""
import os
import sys
from pathlib import Path

import pytest

# This file is at: tests/conftest.py
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ecoscore.models.catalog import CategoryCatalog  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up basic test environment variables before any tests run."""
    os.environ.setdefault("ENGINE_LOG_LEVEL", "INFO")
    os.environ.setdefault("LLM_BACKEND", "mock")
    os.environ.setdefault("REDIS_HOST", "localhost")

    yield


@pytest.fixture
def catalog_document() -> dict:
    """Raw catalog document with three keyword categories and a fallback."""
    return {
        "version": "test",
        "categories": {
            "textiles": {
                "name": "Textiles & Clothing",
                "keywords": ["shoes", "shirt"],
                "keyword_synonyms": {"shoes": ["heels"]},
                "exclusion_keywords": ["shoe rack"],
                "sustainability_criteria": {
                    "materials": {"weight": 0.5},
                    "durability": {"weight": 0.5},
                },
                "certifications": ["GOTS"],
            },
            "electronics": {
                "name": "Electronics",
                "keywords": ["phone", "watch"],
                "exclusion_keywords": ["phone case"],
                "sustainability_criteria": {
                    "durability": {
                        "weight": 0.6,
                        "guidelines": ["Warranty of 3+ years"],
                        "indicators": [
                            {
                                "id": "warranty_years",
                                "name": "Warranty length",
                                "evaluation": {
                                    "excellent": {"threshold": 5, "description": "5+ years"},
                                    "good": {"threshold": 3, "description": "3-4 years"},
                                    "acceptable": {"threshold": 2, "description": "2 years"},
                                    "poor": {"threshold": 0, "description": "Less than 2 years"},
                                },
                            }
                        ],
                    },
                    "repairability": {"weight": 0.4},
                },
            },
            "furniture": {
                "name": "Furniture",
                "keywords": ["rack", "shelf"],
                "sustainability_criteria": {"materials": {"weight": 1.0}},
            },
            "general": {
                "name": "General",
                "sustainability_criteria": {
                    "materials": {"weight": 0.5},
                    "durability": {"weight": 0.5},
                },
            },
        },
    }


@pytest.fixture
def catalog(catalog_document) -> CategoryCatalog:
    """Validated test catalog with default scoring thresholds."""
    return CategoryCatalog.model_validate(catalog_document)
