from __future__ import annotations

from pathlib import Path

import orjson

from domain.models import DiagramLayout

SOURCE_SUFFIXES: tuple[str, ...] = (".txt", ".flow", ".bpmn.txt")


def read_source_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def diagram_json_bytes(diagram: DiagramLayout, *, indent: bool = True) -> bytes:
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(diagram.to_dict(), option=option)


def write_diagram(diagram: DiagramLayout, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(diagram_json_bytes(diagram))
    tmp_path.replace(path)


def list_source_files(directory: Path) -> list[Path]:
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.name.endswith(SOURCE_SUFFIXES)
    )
