from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from jsonmetrics.errors import ParseError
from jsonmetrics.fields.config import load_config
from jsonmetrics.metric.emit import metric_to_dict, metrics_to_frame, to_line_protocol
from jsonmetrics.metric.types import Metric
from jsonmetrics.parser import Parser

app = typer.Typer(help="jsonmetrics CLI")

FORMATS = ("json", "line", "csv")

log = logging.getLogger("jsonmetrics")


# -----------------------------
# Helpers
# -----------------------------

def _configure_logging(verbose: bool) -> None:
    if not log.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[jsonmetrics] %(message)s"))
        log.addHandler(h)
    log.setLevel(logging.DEBUG if verbose else logging.INFO)


def _read_input(path: Path) -> bytes:
    if str(path) == "-":
        return sys.stdin.buffer.read()
    path = path.expanduser().resolve()
    if not path.is_file():
        raise typer.BadParameter(f"{path} not found")
    return path.read_bytes()


def _build_parser(config: Path) -> Parser:
    try:
        settings = load_config(config)
        return Parser.from_settings(settings, logger=log)
    except FileNotFoundError:
        raise typer.BadParameter(f"config {config} not found")
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        raise typer.BadParameter(f"invalid config {config}: {e}")


def _render(metrics: List[Metric], fmt: str) -> str:
    if fmt == "json":
        lines = [json.dumps(metric_to_dict(m), ensure_ascii=False) for m in metrics]
        return "\n".join(lines) + ("\n" if lines else "")
    if fmt == "line":
        lines = [to_line_protocol(m) for m in metrics]
        return "\n".join(lines) + ("\n" if lines else "")
    return metrics_to_frame(metrics).to_csv(index=False)


def _render_or_exit(metrics: List[Metric], fmt: str) -> str:
    try:
        return _render(metrics, fmt)
    except ValueError as e:
        typer.secho(f"Output failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _write(text: str, out: Optional[Path], n: int) -> None:
    if out:
        out = out.expanduser().resolve()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        typer.secho(f"Wrote {n} metric(s) to {out}", fg=typer.colors.GREEN, err=True)
    else:
        typer.echo(text, nl=False)


def _check_format(fmt: str) -> str:
    fmt = fmt.strip().lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Unknown format '{fmt}'. Choose one of {list(FORMATS)}")
    return fmt


# -----------------------------
# Commands
# -----------------------------

@app.command()
def parse(
    input: Path = typer.Argument(..., help="JSON document to parse ('-' for stdin)"),
    config: Path = typer.Option(..., "--config", "-c", help="Parser config (YAML or JSON)"),
    fmt: str = typer.Option("json", "--format", "-f", help="Output: json | line | csv"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write output here instead of stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Parse one JSON document into one metric per configured metric block."""
    _configure_logging(verbose)
    fmt = _check_format(fmt)
    parser = _build_parser(config)
    try:
        metrics = parser.parse(_read_input(input))
    except ParseError as e:
        typer.secho(f"Parse failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    _write(_render_or_exit(metrics, fmt), out, len(metrics))


@app.command("parse-lines")
def parse_lines(
    input: Path = typer.Argument(..., help="File with one JSON document per line ('-' for stdin)"),
    config: Path = typer.Option(..., "--config", "-c", help="Parser config (YAML or JSON)"),
    fmt: str = typer.Option("json", "--format", "-f", help="Output: json | line | csv"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write output here instead of stdout"),
    skip_errors: bool = typer.Option(False, "--skip-errors", help="Log and skip lines that fail to parse"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Parse each non-blank line as its own document (first metric block only)."""
    _configure_logging(verbose)
    fmt = _check_format(fmt)
    parser = _build_parser(config)
    buf = _read_input(input)

    metrics: List[Metric] = []
    # \n only; str.splitlines also breaks on U+2028 inside JSON strings
    for lineno, line in enumerate(buf.split(b"\n"), start=1):
        line = line.rstrip(b"\r")
        if not line.strip():
            continue
        try:
            m = parser.parse_line(line)
        except ParseError as e:
            if skip_errors:
                log.warning("line %d skipped: %s", lineno, e)
                continue
            typer.secho(f"Parse failed at line {lineno}: {e}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        if m is not None:
            metrics.append(m)
    _write(_render_or_exit(metrics, fmt), out, len(metrics))


@app.command("check-config")
def check_config(config: Path = typer.Argument(..., help="Parser config (YAML or JSON)")):
    """Validate a parser config and print what it extracts."""
    parser = _build_parser(config)
    typer.echo(f"query syntax: {type(parser.locator).__name__}")
    for spec in parser.configs:
        typer.echo(f"metric {spec.metric_name}: {len(spec.fields)} field(s)")
        for f in spec.fields:
            typer.echo(f"  {f.name} <- {f.query} ({f.type or 'native'})")
    typer.secho("Config OK", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
