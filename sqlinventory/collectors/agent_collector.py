"""SQL Server Agent jobs."""

from typing import Any, Dict, List

from ..models.records import AgentJob
from .base import QueryCollector


class AgentJobsCollector(QueryCollector):
    """Jobs with their enabled flag and earliest next scheduled run."""

    name = "agent_jobs"
    model = AgentJob
    database = "msdb"
    query = """
SELECT j.job_id, j.name AS job_name, CAST(j.enabled AS bit) AS enabled, js.next_run_date, js.next_run_time
FROM dbo.sysjobs j
OUTER APPLY (
    SELECT TOP (1) s.next_run_date, s.next_run_time
    FROM dbo.sysjobschedules s
    WHERE s.job_id = j.job_id AND s.next_run_date > 0
    ORDER BY s.next_run_date, s.next_run_time
) js
ORDER BY j.name
"""

    def _transform(self, rows: List[Dict[str, Any]], **params) -> List[AgentJob]:
        # One entry per job, keeping the earliest scheduled run
        jobs: Dict[Any, Dict[str, Any]] = {}
        for row in rows:
            key = row.get("job_id") or row["job_name"]
            current = jobs.get(key)
            if current is None or _next_run(row) < _next_run(current):
                jobs[key] = row

        return [
            AgentJob(
                job_name=row["job_name"],
                enabled=row.get("enabled"),
                next_run_date=row.get("next_run_date") or None,
                next_run_time=row.get("next_run_time") if row.get("next_run_date") else None,
            )
            for row in jobs.values()
        ]


def _next_run(row: Dict[str, Any]):
    date = row.get("next_run_date") or 0
    if not date:
        return (1, 0, 0)
    return (0, date, row.get("next_run_time") or 0)
