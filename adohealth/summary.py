"""Monthly trend summary of an exported health report.

Run with: adohealth summary ado_detailed_health.csv
"""

from __future__ import annotations

from pathlib import Path

import duckdb
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_OUTPUT
from .errors import ConfigurationError


def get_connection(path: Path) -> duckdb.DuckDBPyConnection:
    """Get DuckDB connection with the export registered as the ``report`` view."""
    if not path.exists():
        raise ConfigurationError(f"Report file not found: {path}")

    source = str(path).replace("'", "''")
    if path.suffix == ".parquet":
        reader = f"read_parquet('{source}')"
    else:
        # Everything as text, "N/A" is turned into NULL below
        reader = f"read_csv('{source}', header = true, all_varchar = true)"

    con = duckdb.connect()
    con.execute(f"""
        CREATE VIEW report AS
        SELECT
            Month AS month,
            CAST(Created_Date AS DATE) AS created_date,
            Status AS status,
            TRY_CAST(Human_Comment_Count AS INTEGER) AS human_comments,
            TRY_CAST(Hours_to_Merge AS DOUBLE) AS hours_to_merge,
            TRY_CAST(Reviewer_Response_Hours AS DOUBLE) AS response_hours
        FROM {reader}
    """)
    return con


def summarize(path: Path | str = DEFAULT_OUTPUT) -> list[dict]:
    """Aggregate the report per month, oldest month first."""
    con = get_connection(Path(path))
    rel = con.sql("""
        SELECT
            month,
            COUNT(*) AS prs,
            COUNT(*) FILTER (WHERE status = 'Completed') AS completed,
            ROUND(MEDIAN(hours_to_merge), 2) AS median_hours_to_merge,
            ROUND(MEDIAN(response_hours), 2) AS median_response_hours,
            ROUND(AVG(human_comments), 2) AS avg_human_comments
        FROM report
        GROUP BY month
        ORDER BY MIN(created_date)
    """)
    columns = rel.columns
    return [dict(zip(columns, values)) for values in rel.fetchall()]


def format_value(value: float | int | None) -> str:
    """Format an aggregate, "N/A" when there was nothing to aggregate."""
    if value is None:
        return "N/A"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def build_summary_table(rows: list[dict]) -> Table:
    table = Table(title="PR Health by Month")
    table.add_column("Month", style="cyan")
    table.add_column("PRs", justify="right")
    table.add_column("Completed", justify="right")
    table.add_column("Median Hours to Merge", justify="right", style="green")
    table.add_column("Median Response Hours", justify="right", style="green")
    table.add_column("Avg Human Comments", justify="right")

    for row in rows:
        table.add_row(
            row["month"],
            format_value(row["prs"]),
            format_value(row["completed"]),
            format_value(row["median_hours_to_merge"]),
            format_value(row["median_response_hours"]),
            format_value(row["avg_human_comments"]),
        )
    return table


def main(path: Path | str = DEFAULT_OUTPUT, console: Console | None = None) -> list[dict]:
    console = console or Console()
    rows = summarize(path)
    if not rows:
        console.print(f"[yellow]No rows in {path}[/]")
        return rows
    console.print(build_summary_table(rows))
    console.print("[dim]Response hours only reflect comments; vote-only reviews are not visible.[/]")
    return rows
