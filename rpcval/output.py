"""Report renderer: rich table formatter, JSON formatter, format dispatch."""

import json
import sys
from io import StringIO

from rich.console import Console
from rich.table import Table

from rpcval.models import ValidationReport


def render(
    report: ValidationReport,
    fmt: str,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Dispatch output to the appropriate formatter.

    Args:
        report: Run report to render.
        fmt: Output format, ``"table"`` or ``"json"``.
        file: Writable file object for output (default: ``sys.stdout``).
        width: Explicit console width (default: auto-detect).

    Raises:
        ValueError: If *fmt* is not ``"table"`` or ``"json"``.
    """
    if fmt == "table":
        render_table(report, file=file, width=width)
    elif fmt == "json":
        render_json(report, file=file)
    else:
        raise ValueError(f"Unknown output format: {fmt!r}")


# ---------------------------------------------------------------------------
# Table (rich) formatter
# ---------------------------------------------------------------------------


def render_table(
    report: ValidationReport,
    *,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Render *report* as a ``rich`` table of validated endpoints to *file*.

    Args:
        report: Run report to render.
        file: Writable file object (default: ``sys.stdout``).
        width: Explicit console width (default: auto-detect).
    """
    out = file or sys.stdout
    console = Console(file=out, highlight=False, width=width)

    survivors = report.survivors
    if survivors:
        table = Table(title=f"Validated RPC endpoints — {len(survivors)}")
        table.add_column("#", justify="right")
        table.add_column("RPC host")
        for index, host in enumerate(survivors, start=1):
            table.add_row(str(index), host)
        console.print(table)

    _print_summary(console, report)


def _print_summary(console: Console, report: ValidationReport) -> None:
    """Print a one-line summary beneath the table."""
    destination = (
        f"written to {report.output_path}" if report.written else "not written"
    )
    console.print(
        f"  {len(report.survivors)} of {report.rpc_host_count} RPC endpoints "
        f"passed ({report.candidate_count} gossip nodes, "
        f"{report.duration_seconds:.1f}s); {destination}"
    )


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------


def render_json(report: ValidationReport, *, file: object | None = None) -> None:
    """Render *report* as JSON to *file*.

    Args:
        report: Run report to render.
        file: Writable file object (default: ``sys.stdout``).
    """
    out = file or sys.stdout
    json.dump(_report_to_dict(report), out, indent=2, default=str)
    out.write("\n")  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _report_to_dict(report: ValidationReport) -> dict:
    """Convert a ``ValidationReport`` to a plain dict."""
    return {
        "timestamp": report.timestamp.isoformat(),
        "duration_seconds": report.duration_seconds,
        "candidate_count": report.candidate_count,
        "rpc_host_count": report.rpc_host_count,
        "survivors": report.survivors,
        "failed": {o.address: o.error for o in report.outcomes if not o.ok},
        "output_path": report.output_path,
        "written": report.written,
    }


def render_to_string(
    report: ValidationReport, fmt: str, *, width: int = 200
) -> str:
    """Render to a string instead of stdout, for tests.

    Args:
        report: Run report to render.
        fmt: Output format, ``"table"`` or ``"json"``.
        width: Console width for table rendering (default: 200).

    Returns:
        The rendered output as a string.
    """
    buf = StringIO()
    render(report, fmt, file=buf, width=width)
    return buf.getvalue()
