"""Plain-text console summary of a collection run."""

from typing import List

from ..models.records import CollectionRun, TargetRecord


def _record_line(record: TargetRecord) -> str:
    sql = record.sql
    version = " ".join(v for v in (sql.edition, sql.version, sql.product_level) if v) or "-"
    return (
        f"{record.server:<30} {record.status:<20} "
        f"{(record.host.os_name or '-'):<40} {version}  "
        f"dbs={len(record.databases)} jobs={len(record.agent_jobs)} logins={len(record.logins)}"
    )


def format_run_summary(run: CollectionRun) -> str:
    """
    Render the run as a fixed-width table followed by totals.

    Args:
        run: Finished collection run

    Returns:
        str: Multi-line summary
    """
    lines: List[str] = [
        f"SQL Server inventory started {run.started_at.isoformat()} ({run.output_mode.value})",
        "=" * 60,
    ]
    lines.extend(_record_line(record) for record in run.records)
    lines.append("=" * 60)

    summary = run.summary
    lines.append(f"Targets: {summary.total} total, {summary.succeeded} succeeded, {summary.errored} errored")
    for server, categories in summary.category_failures.items():
        lines.append(f"  {server}: failed categories: {', '.join(categories)}")

    return "\n".join(lines)
