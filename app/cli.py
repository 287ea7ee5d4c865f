from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.filesystem.plan_repository import FileSystemPlanRepository
from app.config import AppSettings, load_settings
from domain.errors import PlanVizError
from domain.models import PlanNode
from domain.services.convert_plan_to_excalidraw import PlanToExcalidrawConverter

app = typer.Typer(no_args_is_help=True, help="Render DataFusion physical plans as Excalidraw diagrams.")
convert_app = typer.Typer(no_args_is_help=True, help="Convert plan files to .excalidraw scenes.")
app.add_typer(convert_app, name="convert")
console = Console()

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="YAML settings file.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _settings(config_path: Path | None) -> AppSettings:
    try:
        return load_settings(config_path)
    except (FileNotFoundError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _converter(settings: AppSettings) -> PlanToExcalidrawConverter:
    return PlanToExcalidrawConverter(settings.diagram.to_generation_config())


def _load_plan(repository: FileSystemPlanRepository, path: Path) -> PlanNode:
    if not path.exists():
        console.print(f"[red]File not found:[/] {path}")
        raise typer.Exit(code=1)
    try:
        return repository.load_by_path(path)
    except (PlanVizError, ValidationError, orjson.JSONDecodeError) as exc:
        console.print(f"[red]Could not read plan {path}:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@convert_app.command("file")
def convert_file(
    input_path: Path = typer.Argument(..., help="Plan text (.txt/.sql) or PlanNode JSON file."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Target .excalidraw file (defaults to the output dir)."
    ),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    settings = _settings(config_path)
    plans = FileSystemPlanRepository()
    scenes = FileSystemExcalidrawRepository()
    plan = _load_plan(plans, input_path)
    target_path = output or scenes.output_path(input_path, settings.output.output_dir)
    try:
        document = _converter(settings).convert(plan)
    except PlanVizError as exc:
        console.print(f"[red]Conversion failed for {input_path}:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    scenes.save(document, target_path)
    console.print(f"[green]Wrote[/] {target_path}")


@convert_app.command("dir")
def convert_dir(
    input_dir: Optional[Path] = typer.Option(
        None, "--input-dir", help="Directory with plan files."
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Directory to write Excalidraw scene files."
    ),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    settings = _settings(config_path)
    source_dir = input_dir or settings.output.input_dir
    target_dir = output_dir or settings.output.output_dir
    if not source_dir.is_dir():
        console.print(f"[red]Directory not found:[/] {source_dir}")
        raise typer.Exit(code=1)

    plans = FileSystemPlanRepository()
    scenes = FileSystemExcalidrawRepository()
    try:
        pairs = plans.load_all_with_paths(source_dir)
    except (PlanVizError, ValidationError, orjson.JSONDecodeError) as exc:
        console.print(f"[red]Could not read plans in {source_dir}:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    if not pairs:
        console.print(f"[yellow]No plan files found in {source_dir}[/]")
        raise typer.Exit(code=0)

    converter = _converter(settings)
    failures = 0
    for path, plan in pairs:
        try:
            document = converter.convert(plan)
        except PlanVizError as exc:
            failures += 1
            console.print(f"[red]Conversion failed for {path}:[/] {escape(str(exc))}")
            continue
        target_path = scenes.output_path(path, target_dir)
        scenes.save(document, target_path)
        console.print(f"[green]Wrote[/] {target_path}")
    if failures:
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect(
    input_path: Path = typer.Argument(..., help="Plan file to print as a tree."),
) -> None:
    plan = _load_plan(FileSystemPlanRepository(), input_path)
    console.print(_plan_tree(plan))
    console.print(f"[dim]{plan.node_count()} operators[/]")


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Plan file to parse and lay out."),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    settings = _settings(config_path)
    plan = _load_plan(FileSystemPlanRepository(), input_path)
    try:
        document = _converter(settings).convert(plan)
    except PlanVizError as exc:
        console.print(f"[red]Validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print(
        f"[green]Valid plan:[/] {input_path} "
        f"({plan.node_count()} operators, {len(document.elements)} elements)"
    )


def _plan_tree(plan: PlanNode) -> Tree:
    tree = Tree(_node_label(plan))
    _add_children(tree, plan)
    return tree


def _add_children(branch: Tree, node: PlanNode) -> None:
    for child in node.children:
        _add_children(branch.add(_node_label(child)), child)


def _node_label(node: PlanNode) -> str:
    label = f"[bold]{escape(node.operator)}[/]"
    if node.properties:
        details = ", ".join(f"{key}={value}" for key, value in node.properties.items())
        label = f"{label} [dim]{escape(details)}[/]"
    return label


if __name__ == "__main__":
    app()
