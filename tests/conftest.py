"""Fixture loader for urlmask tests.

Loads YAML fixtures from tests/fixtures/ and flattens them into cases
for parametrized testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from urlmask import PatternCache

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class CoerceCase:
    """A single mask -> pattern case from a coercion fixture."""

    fixture_name: str
    mask: str
    expect: str

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.mask or '<empty>'}"


@dataclass
class MatchCase:
    """A single URL-against-mask case from a match fixture."""

    fixture_name: str
    case_name: str
    url: str
    mask: str
    base_url: str | None
    matches: bool
    params: dict[str, Any]

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.case_name}"


def _load_documents(name: str) -> list[dict[str, Any]]:
    with (FIXTURE_DIR / name).open() as f:
        return [doc for doc in yaml.safe_load_all(f) if doc is not None]


def load_coerce_cases() -> list[CoerceCase]:
    """Load all coercion fixture cases."""
    return [
        CoerceCase(fixture_name=doc["name"], mask=case["mask"], expect=case["expect"])
        for doc in _load_documents("coerce.yaml")
        for case in doc["cases"]
    ]


def load_match_cases() -> list[MatchCase]:
    """Load all match fixture cases.

    Repeated parameters are written as YAML lists and compared as tuples.
    """
    cases: list[MatchCase] = []
    for doc in _load_documents("match.yaml"):
        for case in doc["cases"]:
            params = {
                str(k): tuple(v) if isinstance(v, list) else str(v)
                for k, v in (case.get("params") or {}).items()
            }
            cases.append(
                MatchCase(
                    fixture_name=doc["name"],
                    case_name=case["name"],
                    url=case["url"],
                    mask=case["mask"],
                    base_url=case.get("base_url"),
                    matches=case["matches"],
                    params=params,
                )
            )
    return cases


@pytest.fixture
def cache() -> PatternCache:
    return PatternCache(maxsize=64)
