from __future__ import annotations

from functools import cache, lru_cache
from pathlib import Path

from domain.models import ProcessDocument
from domain.services.parse_process_text import parse_process_text


@lru_cache(maxsize=1)
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


def fixture_path(name: str) -> Path:
    return repo_root() / "examples" / "process" / name


@cache
def load_process_text(name: str) -> str:
    return fixture_path(name).read_text(encoding="utf-8")


def load_process_fixture(name: str) -> ProcessDocument:
    return parse_process_text(load_process_text(name))
