"""CSV export for usage trees (raw, one row per run) and aggregates (one row per workflow).

No header row is written. Quoting follows the csv module's minimal rules, so
names containing commas, quotes or newlines round-trip.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, Iterator, Literal, TextIO

from actions_usage.models import PLATFORMS, AggregateRecord, UsageTree
from actions_usage.services.aggregation_service import aggregate

ExportMode = Literal["raw", "aggregate"]
EXPORT_MODES: tuple[ExportMode, ...] = ("raw", "aggregate")


def raw_rows(tree: UsageTree) -> Iterator[list[str]]:
    for repository, workflow, run_node in tree.iter_runs():
        usage = run_node.usage
        platform_ms = [usage.billable_ms(p) if usage is not None else 0 for p in PLATFORMS]
        yield [
            repository.name,
            str(workflow.id),
            workflow.name,
            str(run_node.run.id),
            *(str(ms) for ms in platform_ms),
        ]


def aggregate_rows(records: Iterable[AggregateRecord]) -> Iterator[list[str]]:
    for r in records:
        yield [
            r.repository,
            str(r.workflow_id),
            r.workflow_name,
            str(r.run_count),
            str(r.total_billable_ms),
            str(r.average_billable_ms),
        ]


def _write_rows(rows: Iterable[list[str]], fh: TextIO) -> int:
    writer = csv.writer(fh, lineterminator="\n")
    n = 0
    for row in rows:
        writer.writerow(row)
        n += 1
    return n


def write_raw_csv(tree: UsageTree, fh: TextIO) -> int:
    """Write one row per run; returns the number of rows written."""
    return _write_rows(raw_rows(tree), fh)


def write_aggregate_csv(records: Iterable[AggregateRecord], fh: TextIO) -> int:
    return _write_rows(aggregate_rows(records), fh)


def render_report(tree: UsageTree, mode: ExportMode) -> str:
    buf = io.StringIO()
    if mode == "raw":
        write_raw_csv(tree, buf)
    elif mode == "aggregate":
        write_aggregate_csv(aggregate(tree), buf)
    else:
        raise ValueError(f"unknown export mode: {mode!r}")
    return buf.getvalue()
