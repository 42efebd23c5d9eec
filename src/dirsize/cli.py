"""CLI interface for dirsize."""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import NoReturn

import click

from dirsize.core.aggregator import SizeAggregator
from dirsize.core.privileges import PrivilegeError, is_elevated, run_privileged_scan
from dirsize.core.walker import DirSizeError, RootPathError, TreeWalker
from dirsize.core.worker import ScanJob
from dirsize.models.report import build_warning
from dirsize.models.scan_result import SubdirSizesResult
from dirsize.settings import Settings
from dirsize.utils import bytes_to_human, format_elapsed, relative_label, sort_by_size

log = logging.getLogger(__name__)

_POLL_INTERVAL = 0.2


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_aggregator(exclude: tuple[str, ...], one_file_system: bool) -> SizeAggregator:
    return SizeAggregator(TreeWalker(one_file_system=one_file_system), exclude=exclude)


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, verbose: int) -> None:
    """dirsize: disk usage of a directory tree, per sub-folder."""
    _setup_logging(verbose)
    ctx.obj = Settings()


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option("--depth", "-d", type=click.IntRange(min=0), default=None,
              help="Depth of sub-folders to display (0 for all)")
@click.option("--sort/--no-sort", "sort_results", default=None, help="Sort results by size (largest first)")
@click.option("--subs/--no-subs", default=True, help="Show sub-folder sizes")
@click.option("--exclude", "-x", multiple=True, help="Glob of file or folder names to skip. Repeatable.")
@click.option("--one-file-system/--cross-file-systems", default=None,
              help="Do not descend into other mounted filesystems")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--elevate", is_flag=True, help="Re-scan as root via pkexec if access was denied")
@click.pass_obj
def scan(
    settings: Settings,
    path: Path,
    depth: int | None,
    sort_results: bool | None,
    subs: bool,
    exclude: tuple[str, ...],
    one_file_system: bool | None,
    as_json: bool,
    elevate: bool,
) -> None:
    """Show the total size of PATH and the size of each sub-folder."""
    if depth is None:
        depth = settings.get_int("scan.depth")
    if sort_results is None:
        sort_results = settings.get_bool("scan.sort")
    if one_file_system is None:
        one_file_system = settings.get_bool("scan.one_file_system")
    exclude = settings.get_patterns("scan.exclude") + exclude
    error_limit = settings.get_int("display.error_limit")

    aggregator = _build_aggregator(exclude, one_file_system)

    started = time.monotonic()
    try:
        if as_json:
            result = aggregator.compute_subdir_sizes(path, depth)
        else:
            click.echo(f"Calculating size for: {path.absolute()}")
            result = _scan_interactive(aggregator, path, depth)
    except RootPathError as exc:
        log.warning("Cannot scan %s: %s", path, exc)
        _fail(str(exc))

    if elevate and result.report.permission_denied and not is_elevated():
        if not as_json:
            click.echo(f"\n{click.style('Some locations were not readable, re-scanning as root...', fg='yellow')}")
        try:
            result = run_privileged_scan(result.root, depth, exclude, one_file_system)
        except PrivilegeError as exc:
            log.warning("Privilege escalation failed: %s", exc)
            if not as_json:
                click.echo(f"  {click.style('!', fg='yellow')} {exc}", err=True)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _print_scan(result, subs=subs, sort_results=sort_results)
    click.echo(f"\n{click.style('Scanned in', fg='bright_black')} {format_elapsed(time.monotonic() - started)}")

    warning = build_warning(result.report, is_elevated(), error_limit)
    if warning:
        click.echo(f"\n{click.style('Warning:', fg='yellow', bold=True)} {warning}", err=True)


def _scan_interactive(aggregator: SizeAggregator, path: Path, depth: int) -> SubdirSizesResult:
    """Run the scan in the background, echoing progress; Ctrl-C keeps partial results."""
    job = ScanJob(aggregator, path, depth)
    job.start()
    try:
        while not job.done():
            progress = job.snapshot
            if progress.entries_seen and sys.stderr.isatty():
                click.echo(
                    f"\r  {progress.entries_seen:,} entries, {bytes_to_human(progress.bytes_seen)}",
                    nl=False,
                    err=True,
                )
            time.sleep(_POLL_INTERVAL)
    except KeyboardInterrupt:
        job.cancel()
    if sys.stderr.isatty():
        click.echo("\r\033[K", nl=False, err=True)
    return job.result()


def _print_scan(result: SubdirSizesResult, *, subs: bool, sort_results: bool) -> None:
    click.echo(f"\nTotal Size: {click.style(bytes_to_human(result.total_bytes), fg='green', bold=True)}")
    if result.cancelled:
        click.echo(click.style("(scan interrupted, sizes are incomplete)", fg="yellow"))

    if not subs:
        return

    entries = sort_by_size(result.entries) if sort_results else list(result.entries)
    click.echo("\nSubfolder sizes:")
    for entry in entries:
        if entry.path == result.root:
            continue
        label = relative_label(entry.path, result.root)
        click.echo(f"{label:40s} {bytes_to_human(entry.total_bytes)}")


# ── total ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option("--exclude", "-x", multiple=True, help="Glob of file or folder names to skip. Repeatable.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def total(settings: Settings, path: Path, exclude: tuple[str, ...], as_json: bool) -> None:
    """Print only the total size of PATH."""
    exclude = settings.get_patterns("scan.exclude") + exclude
    aggregator = _build_aggregator(exclude, settings.get_bool("scan.one_file_system"))
    try:
        result = aggregator.compute_total(path)
    except RootPathError as exc:
        _fail(str(exc))

    if as_json:
        click.echo(json.dumps(
            {
                "root": str(result.root),
                "total_bytes": result.total_bytes,
                "errors": result.report.to_list(),
            },
            indent=2,
        ))
        return

    click.echo(f"{bytes_to_human(result.total_bytes)}\t{result.root}")
    warning = build_warning(result.report, is_elevated(), settings.get_int("display.error_limit"))
    if warning:
        click.echo(f"{click.style('Warning:', fg='yellow', bold=True)} {warning}", err=True)


# ── scan-as-root (internal, hidden) ──────────────────────────────────────

@main.command("scan-as-root", hidden=True)
def scan_as_root() -> None:
    """Internal command invoked via pkexec to scan as root.

    Reads a JSON request from stdin with the shape::

        {"root": "/path", "max_depth": 1, "exclude": ["*.tmp"], "one_file_system": false}

    Writes the scan result as JSON to stdout.
    """
    try:
        request = json.loads(sys.stdin.read())
        root = request["root"]
        max_depth = int(request.get("max_depth", 0))
        exclude = tuple(request.get("exclude", []))
        one_file_system = bool(request.get("one_file_system", False))
    except (json.JSONDecodeError, TypeError, KeyError, ValueError) as exc:
        _fail(f"Bad input: {exc}")

    try:
        result = _build_aggregator(exclude, one_file_system).compute_subdir_sizes(root, max_depth)
    except DirSizeError as exc:
        _fail(str(exc))
    click.echo(json.dumps(result.to_dict()))


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Read or change saved defaults."""


@config.command("get")
@click.argument("key")
@click.pass_obj
def config_get(settings: Settings, key: str) -> None:
    """Show the value of KEY (e.g. scan.depth)."""
    click.echo(json.dumps(settings.get(key)))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def config_set(settings: Settings, key: str, value: str) -> None:
    """Set KEY to VALUE (parsed as JSON when possible)."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    settings.set(key, parsed)
    click.echo(f"{key} = {json.dumps(parsed)}")
