"""
CLI interface for word records.

Usage:
    wordrecords add en serendipity
    wordrecords words en
    wordrecords count en
    wordrecords page en 0
    wordrecords clear en
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .api import RecordKeeper
from .config import STORE_PATH_ENV, get_default_store_path
from .logging_config import configure_ops_log, enable_debug_mode, remove_ops_log
from .types import RecordPage


app = typer.Typer(
    name="wordrecords",
    help="Bounded per-area word records.",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"wordrecords {version('wordrecords')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_store_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _store_callback(value: Optional[Path]):
    global _store_override
    _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


if os.environ.get("WORDRECORDS_VERBOSE") == "1":
    enable_debug_mode()


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar=STORE_PATH_ENV,
        help="Path to the store directory",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """Bounded per-area word records."""


def _open_keeper() -> RecordKeeper:
    """Open the store, with the operations log attached for the command's duration."""
    try:
        kp = RecordKeeper.open(_get_store_override())
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    return kp


def _run(operation):
    """
    Run ``operation(keeper)`` to completion and close the store.

    Invalid arguments (a bad area or word) exit with status 1.
    """
    kp = _open_keeper()
    handler = configure_ops_log(kp.config.path)
    try:
        return asyncio.run(operation(kp))
    except (TypeError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        kp.close()
        remove_ops_log(handler)


def _format_page(page: RecordPage, index: int) -> str:
    record_set = page.record_set
    lines = [
        f"Page {index + 1}/{page.page_count}  "
        f"(set {record_set.id}, {record_set.word_count} words)"
    ]
    for record in record_set.data:
        d = record.date
        lines.append(f"  {d[4:]}-{d[:2]}-{d[2:4]}  {', '.join(record.data)}")
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command()
def add(
    area: Annotated[str, typer.Argument(help="Area (namespace) to record into")],
    words: Annotated[list[str], typer.Argument(help="Words to record, oldest first")],
):
    """Record one or more words in today's record."""
    async def op(kp: RecordKeeper):
        for word in words:
            await kp.add_record(area, word)
        return await kp.get_word_count(area)

    count = _run(op)
    if _get_json_output():
        typer.echo(json.dumps({"area": area, "added": len(words), "wordCount": count}))
    else:
        typer.echo(f"Recorded {len(words)} word(s) in {area} ({count} total)")


@app.command()
def words(
    area: Annotated[str, typer.Argument(help="Area (namespace) to read")],
    limit: Annotated[Optional[int], typer.Option(
        "--limit", "-n", min=1, help="Maximum number of words",
    )] = None,
):
    """List all words of an area, most recent first."""
    result = _run(lambda kp: kp.get_all_words(area))
    if limit is not None:
        result = result[:limit]
    if _get_json_output():
        typer.echo(json.dumps(result, ensure_ascii=False))
    else:
        for word in result:
            typer.echo(word)


@app.command()
def count(
    area: Annotated[str, typer.Argument(help="Area (namespace) to count")],
):
    """Show the number of recorded word events of an area."""
    result = _run(lambda kp: kp.get_word_count(area))
    if _get_json_output():
        typer.echo(json.dumps({"area": area, "wordCount": result}))
    else:
        typer.echo(str(result))


@app.command()
def page(
    area: Annotated[str, typer.Argument(help="Area (namespace) to read")],
    index: Annotated[int, typer.Argument(help="Page index, 0 is the latest set")] = 0,
):
    """Show one record set of an area."""
    result = _run(lambda kp: kp.get_record_set(area, index))
    if _get_json_output():
        if result is None:
            typer.echo(json.dumps({}))
        else:
            typer.echo(json.dumps({
                "recordSet": result.record_set.to_dict(),
                "pageCount": result.page_count,
            }, ensure_ascii=False))
    elif result is None:
        typer.echo(f"No records at page {index} of {area}.")
    else:
        typer.echo(_format_page(result, index))


@app.command()
def clear(
    area: Annotated[str, typer.Argument(help="Area (namespace) to clear")],
    yes: Annotated[bool, typer.Option(
        "--yes", "-y", help="Don't ask for confirmation",
    )] = False,
):
    """Delete all records of an area."""
    if not yes:
        typer.confirm(f"Delete all records of {area}?", abort=True)
    _run(lambda kp: kp.clear_records(area))
    typer.echo(f"Cleared {area}")


@app.command()
def config():
    """Show the store configuration."""
    kp = _open_keeper()
    try:
        cfg = kp.config
        info = {
            "path": str(cfg.path),
            "config": str(cfg.config_path),
            "backend": cfg.backend,
            "rollover_word_count": cfg.limits.rollover_word_count,
            "max_record_sets": cfg.limits.max_record_sets,
        }
    finally:
        kp.close()
    if _get_json_output():
        typer.echo(json.dumps(info))
    else:
        for key, value in info.items():
            typer.echo(f"{key}: {value}")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        store_path = _get_store_override() or get_default_store_path()
        log_path = log_exception(e, context="wordrecords CLI", store_path=store_path)
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
