from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.filesystem.plan_repository import FileSystemPlanRepository
from app.config import AppSettings, DiagramFormat, load_settings
from app.diagram_wiring import RenderedDiagram, render_diagram
from domain.errors import PlanDiagramError
from domain.example_plan import load_example_plan
from domain.models import Plan

app = typer.Typer(no_args_is_help=True)
console = Console()
logger = logging.getLogger(__name__)

ConfigOption = typer.Option(None, "--config", help="YAML settings file.")
FormatOption = typer.Option(None, "--format", "-f", help="Diagram format: svg or excalidraw.")


def _bootstrap(config_path: Optional[Path]) -> AppSettings:
    try:
        settings = load_settings(config_path)
    except (ValidationError, FileNotFoundError) as exc:
        console.print(f"[red]Invalid settings:[/] {exc}")
        raise typer.Exit(code=1) from exc
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    return settings


def _parse_format(value: Optional[str]) -> Optional[DiagramFormat]:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized == "svg":
        return "svg"
    if normalized == "excalidraw":
        return "excalidraw"
    console.print(f"[red]Unknown format:[/] {value}")
    raise typer.Exit(code=2)


def _load_plan(path: Path) -> Plan:
    if not path.exists():
        console.print(f"[red]File not found:[/] {path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemPlanRepository().load_by_path(path)
    except ValueError as exc:
        console.print(f"[red]Invalid plan {path}:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _render(
    plan: Plan, settings: AppSettings, diagram_format: Optional[DiagramFormat]
) -> RenderedDiagram:
    try:
        return render_diagram(plan, settings, diagram_format)
    except PlanDiagramError as exc:
        console.print(f"[red]Render failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _write(diagram: RenderedDiagram, target_path: Path, settings: AppSettings, url: bool) -> None:
    diagram.save(target_path)
    console.print(f"[green]Wrote[/] {target_path}")
    if url:
        if diagram.excalidraw is None:
            console.print("[yellow]--url is only supported for the excalidraw format[/]")
            return
        console.print(diagram.excalidraw_url(settings.render.excalidraw_base_url), soft_wrap=True)


@app.command("render")
def render(
    plan_path: Path = typer.Argument(..., help="Plan JSON file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Target diagram file."),
    diagram_format: Optional[str] = FormatOption,
    url: bool = typer.Option(False, "--url", help="Print a shareable Excalidraw URL."),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    settings = _bootstrap(config_path)
    plan = _load_plan(plan_path)
    diagram = _render(plan, settings, _parse_format(diagram_format))
    target_path = output or settings.render.output_dir / f"{plan_path.stem}{diagram.suffix}"
    _write(diagram, target_path, settings, url)


@app.command("render-all")
def render_all(
    input_dir: Path = typer.Option(Path("data/plans"), help="Directory with plan JSON files."),
    output_dir: Optional[Path] = typer.Option(None, help="Directory to write diagrams."),
    diagram_format: Optional[str] = FormatOption,
    config_path: Optional[Path] = ConfigOption,
) -> None:
    settings = _bootstrap(config_path)
    repository = FileSystemPlanRepository()
    try:
        pairs = repository.load_all_with_paths(input_dir)
    except ValueError as exc:
        console.print(f"[red]Invalid plan in {input_dir}:[/] {exc}")
        raise typer.Exit(code=1) from exc
    if not pairs:
        console.print(f"[yellow]No plan files found in {input_dir}[/]")
        raise typer.Exit(code=0)

    resolved_format = _parse_format(diagram_format)
    target_dir = output_dir or settings.render.output_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    for path, plan in pairs:
        diagram = _render(plan, settings, resolved_format)
        _write(diagram, target_dir / f"{path.stem}{diagram.suffix}", settings, url=False)


@app.command("example")
def example(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Target diagram file."),
    diagram_format: Optional[str] = FormatOption,
    url: bool = typer.Option(False, "--url", help="Print a shareable Excalidraw URL."),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    settings = _bootstrap(config_path)
    diagram = _render(load_example_plan(), settings, _parse_format(diagram_format))
    target_path = output or settings.render.output_dir / f"example{diagram.suffix}"
    _write(diagram, target_path, settings, url)


@app.command("validate")
def validate(
    plan_path: Path = typer.Argument(..., help="Plan JSON file to validate."),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    settings = _bootstrap(config_path)
    plan = _load_plan(plan_path)
    diagram = _render(plan, settings, "svg")
    render_pass = diagram.render_pass
    logger.debug("Validated %s", plan_path)
    console.print(
        f"[green]Valid plan:[/] {plan_path} "
        f"({len(render_pass.node_boxes)} nodes, {len(render_pass.wires)} wires, "
        f"{len(render_pass.labels)} labels)"
    )


if __name__ == "__main__":
    app()
