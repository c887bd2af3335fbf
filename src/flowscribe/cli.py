# src/flowscribe/cli.py
"""flowscribe command line.

`generate` compiles a workflow JSON document into Python artifacts; `paths`
lists the expanded execution paths without contacting a plugin engine.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from flowscribe import __version__
from flowscribe.contracts import EngineConfigurationError, TranspilerResult, WorkflowValidationError
from flowscribe.core.config import FlowscribeSettings, TranspilerConfig, load_settings, load_workflow_file

__all__ = ["app"]

app = typer.Typer(
    name="flowscribe",
    help="flowscribe: generate Python code from visual workflow graphs.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"flowscribe version {__version__}")
        raise typer.Exit()


def _load_dotenv() -> bool:
    """Pick up FLOWSCRIBE_* overrides and API tokens from a local .env file."""
    from dotenv import load_dotenv

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """flowscribe: generate Python code from visual workflow graphs."""
    from flowscribe.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv()


def _load_settings_or_exit(settings: Path | None) -> FlowscribeSettings:
    if settings is None:
        return FlowscribeSettings()
    try:
        return load_settings(settings.expanduser())
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _load_config_or_exit(workflow: Path, settings: Path | None, plugins: str | None) -> TranspilerConfig:
    loaded = _load_settings_or_exit(settings)
    if plugins is not None:
        loaded = loaded.model_copy(update={"bucket_or_base_path": plugins})

    try:
        nodes, edges = load_workflow_file(workflow.expanduser())
        return loaded.to_transpiler_config(nodes, edges)
    except FileNotFoundError:
        typer.echo(f"Error: Workflow file not found: {workflow}", err=True)
        raise typer.Exit(1) from None
    except WorkflowValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _report_errors(result: TranspilerResult) -> None:
    if not result.errors_by_node_id:
        return
    typer.secho(f"{len(result.errors_by_node_id)} node(s) failed:", fg=typer.colors.YELLOW, err=True)
    for node_id, message in result.errors_by_node_id.items():
        typer.echo(f"  - {node_id}: {message}", err=True)


def _write_artifacts(result: TranspilerResult, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    for artifact_id, code in result.artifacts.items():
        target = output_dir / f"{artifact_id}.py"
        target.write_text(f"{code}\n" if code else "", encoding="utf-8")
        typer.echo(f"Wrote {target}", err=True)


@app.command()
def generate(
    workflow: Path = typer.Argument(..., help="Workflow JSON file ({'nodes': [...], 'edges': [...]})."),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    plugins: str | None = typer.Option(
        None,
        "--plugins",
        "-p",
        help="Plugin directory or bucket (overrides bucket_or_base_path from settings).",
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Write one <artifact>.py file per artifact into this directory.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (generated code) or 'json' (full result).",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with status 1 when any node failed to generate.",
    ),
) -> None:
    """Generate code for every path of a workflow."""
    from flowscribe.transpiler import generate_code_sync

    config = _load_config_or_exit(workflow, settings, plugins)

    try:
        result = generate_code_sync(config)
    except EngineConfigurationError as e:
        typer.echo(f"Engine configuration error: {e}", err=True)
        raise typer.Exit(1) from None

    if output_format == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif output_dir is None:
        for index, (artifact_id, code) in enumerate(result.artifacts.items()):
            if index:
                typer.echo("")
            typer.echo(f"# === {artifact_id} ===")
            typer.echo(code)

    if output_dir is not None:
        _write_artifacts(result, output_dir.expanduser())

    _report_errors(result)
    if strict and result.has_errors:
        raise typer.Exit(1)


@app.command()
def paths(
    workflow: Path = typer.Argument(..., help="Workflow JSON file ({'nodes': [...], 'edges': [...]})."),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file (for the node type vocabulary).",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (structured JSON).",
    ),
) -> None:
    """Show the expanded execution paths of a workflow without running plugins."""
    from flowscribe.transpiler import artifact_ids, find_workflow_paths

    # No engine is built, so any placeholder location will do
    config = _load_config_or_exit(workflow, settings, plugins=".")
    named = artifact_ids(find_workflow_paths(config))

    if output_format == "json":
        typer.echo(json.dumps({artifact_id: list(path.nodes) for artifact_id, path in named}, indent=2))
        return

    if not named:
        typer.echo("No paths found.")
        return
    for artifact_id, path in named:
        typer.echo(f"{artifact_id}: {' -> '.join(path.nodes)}")


if __name__ == "__main__":
    app()
