from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.filesystem.diagram_files import (
    diagram_json_bytes,
    list_source_files,
    read_source_text,
    write_diagram,
)
from app.config import load_settings
from app.diagram_wiring import build_generator
from domain.models import DiagramLayoutError
from domain.services.parse_process_text import parse_process_text
from domain.services.resolve_containment import resolve_containment

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)

ConfigOption = typer.Option(None, "--config", help="YAML settings file.")


@app.command("render")
def render(
    input_path: Path = typer.Argument(..., help="Process text file."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write positioned nodes and edges here instead of stdout.",
    ),
    config: Path | None = ConfigOption,
) -> None:
    if not input_path.exists():
        err_console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    generator = build_generator(load_settings(config))
    try:
        diagram = generator.generate(read_source_text(input_path))
    except DiagramLayoutError as exc:
        err_console.print(f"[red]Layout failed:[/] {exc}")
        raise typer.Exit(code=1) from exc

    if output is None:
        sys.stdout.write(diagram_json_bytes(diagram).decode("utf-8") + "\n")
        return
    write_diagram(diagram, output)
    console.print(f"[green]Wrote[/] {output}")


@app.command("render-dir")
def render_dir(
    input_dir: Path = typer.Option(Path("examples/process"), help="Directory with process text files."),
    output_dir: Path = typer.Option(Path("data/diagrams"), help="Directory to write diagram JSON files."),
    config: Path | None = ConfigOption,
) -> None:
    sources = list_source_files(input_dir) if input_dir.is_dir() else []
    if not sources:
        console.print(f"[yellow]No process files found in {input_dir}[/]")
        raise typer.Exit(code=0)

    generator = build_generator(load_settings(config))
    failures = 0
    for path in sources:
        try:
            diagram = generator.generate(read_source_text(path))
        except DiagramLayoutError as exc:
            failures += 1
            err_console.print(f"[red]Layout failed for {path}:[/] {exc}")
            continue
        target_path = output_dir / f"{path.name.split('.')[0]}.json"
        write_diagram(diagram, target_path)
        console.print(f"[green]Wrote[/] {target_path}")
    if failures:
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect_source(input_path: Path = typer.Argument(..., help="Process text file.")) -> None:
    if not input_path.exists():
        err_console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    document = parse_process_text(read_source_text(input_path))
    assignment = resolve_containment(document)

    summary = Table(title="Document")
    summary.add_column("Records")
    summary.add_column("Count", justify="right")
    summary.add_row("containers", str(len(document.containers)))
    summary.add_row("sub-containers", str(len(document.sub_containers)))
    summary.add_row("elements", str(len(document.elements)))
    summary.add_row("connections", str(len(document.connections)))
    console.print(summary)

    elements = Table(title="Elements")
    for column in ("id", "kind", "variant", "label", "bucket"):
        elements.add_column(column)
    for element in document.unique_elements():
        elements.add_row(
            element.id,
            element.kind,
            element.variant or "",
            element.label,
            assignment.bucket_of(element.id).bucket_id,
        )
    console.print(elements)

    duplicates = document.duplicate_element_ids()
    if duplicates:
        console.print(f"[yellow]Duplicate ids (first definition used):[/] {', '.join(duplicates)}")


if __name__ == "__main__":
    app()
