"""Learning CLI commands.

Provides commands for:
- Learning a disjunctive concept from a graph file and example entities
- Showing the effective learner configuration
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..configuration.settings import ConfigurationManager, LearnerConfig
from ..errors import InvalidConfigError, QTLearnError
from ..errors.user_messages import format_error_for_cli
from ..qtl.graph import GraphModel
from ..qtl.learner import QTL2Disjunctive
from ..qtl.problems import PosNegLearningProblem

logger = logging.getLogger(__name__)

learn_app = typer.Typer(help="Disjunctive query tree learning commands")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Optional[Path]) -> LearnerConfig:
    return ConfigurationManager(config_path).load()


def _load_examples(
    examples_path: Optional[Path],
    positives: List[str],
    negatives: List[str],
) -> Tuple[List[str], List[str]]:
    """Merge examples given on the command line with those of an examples file."""
    positives = list(positives)
    negatives = list(negatives)
    if examples_path is None:
        return positives, negatives

    try:
        with open(examples_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise InvalidConfigError(
            f"Cannot read examples file {examples_path}: {exc}",
            details={"path": str(examples_path)},
        ) from exc

    if not isinstance(data, dict):
        raise InvalidConfigError(
            "Examples file must contain 'positives' and 'negatives' lists",
            details={"path": str(examples_path)},
        )
    positives.extend(str(e) for e in data.get("positives", []))
    negatives.extend(str(e) for e in data.get("negatives", []))
    return positives, negatives


def _fail(error: QTLearnError) -> None:
    console.print(f"[red]{escape(format_error_for_cli(error))}[/red]")
    raise typer.Exit(1)


@learn_app.command("run")
def run_command(
    graph: Path = typer.Argument(..., help="JSON file with the graph triples"),
    positives: List[str] = typer.Option([], "--pos", "-p", help="Positive example entity (repeatable)"),
    negatives: List[str] = typer.Option([], "--neg", "-n", help="Negative example entity (repeatable)"),
    examples: Optional[Path] = typer.Option(None, "--examples", "-e", help="YAML/JSON file with positives and negatives"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Learner configuration YAML"),
    max_time: Optional[int] = typer.Option(None, "--max-time", help="Override max execution time in seconds"),
    format_output: str = typer.Option("table", "--format", help="Output format: table or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    """Learn a disjunctive concept separating positive from negative examples.

    Examples:
        qtlearn learn run graph.json --pos alice --pos bob --neg rex
        qtlearn learn run graph.json --examples examples.yaml --format json
    """
    _configure_logging(verbose)

    if format_output not in ("table", "json"):
        console.print(f"[red]Invalid format: {format_output}[/red]")
        console.print("Valid: table, json")
        raise typer.Exit(1)

    try:
        config = _load_config(config_path)
        if max_time is not None:
            config.max_execution_time_in_seconds = max_time

        pos, neg = _load_examples(examples, positives, negatives)
        if not pos:
            console.print("[red]At least one positive example is required[/red]")
            raise typer.Exit(1)

        model = GraphModel.load_json(graph)
        problem = PosNegLearningProblem.of(pos, neg)
        learner = QTL2Disjunctive.for_graph(problem, model, config)
        solution = learner.start()
    except QTLearnError as exc:
        _fail(exc)
        return

    partial_solutions = learner.get_partial_solutions()

    if format_output == "json":
        output = {
            "success": solution is not None,
            "solution": solution.to_dict() if solution is not None else None,
            "partial_solutions": [
                {
                    "description": str(ps.tree.to_description()),
                    "score": ps.tree_score.to_dict(),
                }
                for ps in partial_solutions
            ],
            "run": learner.run_report.to_dict(),
        }
        print(json.dumps(output, indent=2))
        return

    if not partial_solutions:
        console.print("[yellow]No partial solution reached the minimum tree score[/yellow]")
        return

    table = Table(title=f"Partial Solutions ({len(partial_solutions)} accepted)")
    table.add_column("#", justify="right")
    table.add_column("Description", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Pos covered", justify="right", style="green")
    table.add_column("Neg covered", justify="right", style="red")
    for index, ps in enumerate(partial_solutions, start=1):
        table.add_row(
            str(index),
            str(ps.tree.to_description()),
            f"{ps.score:.4f}",
            str(len(ps.tree_score.covered_positives)),
            str(len(ps.tree_score.covered_negatives)),
        )
    console.print(table)

    console.print(f"[bold]Combined solution:[/bold] {solution.description}")
    console.print(f"[bold]Accuracy:[/bold] {solution.accuracy:.4f}")
    console.print(
        f"Rounds: {learner.run_report.rounds}, "
        f"elapsed: {learner.run_report.elapsed:.2f}s, "
        f"stop reason: {learner.run_report.stop_reason.value if learner.run_report.stop_reason else 'n/a'}"
    )


@learn_app.command("show-config")
def show_config_command(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Learner configuration YAML"),
) -> None:
    """Print the effective learner configuration as YAML."""
    try:
        config = _load_config(config_path)
    except QTLearnError as exc:
        _fail(exc)
        return
    print(yaml.safe_dump(config.model_dump(mode="json"), default_flow_style=False, sort_keys=False), end="")
