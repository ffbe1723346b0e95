"""Main CLI entry point for adohealth - Azure DevOps pull request health reports."""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import EXPORT_FORMATS, HealthConfig, setup_logging
from ..errors import HealthReportError, UpstreamError

EPILOG = """\
Lead_Reviewer and Reviewer_Response_Hours are based on comments only.
Reviewers who vote without leaving a comment are not visible to these metrics.

Run 'adohealth <command> --help' for more information on a command.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adohealth",
        description="Pull request health metrics for Azure DevOps repositories",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Config file (default: adohealth.yaml in current directory, if present)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # report command - fetch PRs and export one row per PR
    report_parser = subparsers.add_parser(
        "report",
        help="Fetch PRs and export health metrics",
        description="Fetch PRs and comment threads from Azure DevOps and export one row per PR.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    report_parser.add_argument(
        "--start",
        "-s",
        type=str,
        default=None,
        help="Only PRs created on or after this date (ISO format: YYYY-MM-DD). Overrides START_DATE.",
    )
    report_parser.add_argument(
        "--end",
        "-e",
        type=str,
        default=None,
        help=(
            "Only PRs created on or before this date, the whole day included "
            "(ISO format: YYYY-MM-DD). Overrides END_DATE."
        ),
    )
    _add_output_arguments(report_parser)
    report_parser.add_argument(
        "--limit",
        "-n",
        type=int,
        default=None,
        help="Limit number of PRs to fetch",
    )
    report_parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="PRs per API page (default: 100)",
    )
    report_parser.add_argument(
        "--concurrency",
        "-j",
        type=int,
        default=None,
        help="PRs processed concurrently (default: 4)",
    )

    # repos command - find the repo id
    repos_parser = subparsers.add_parser(
        "repos",
        help="List repositories and their ids",
        description="List repositories of the organisation to find ADO_REPO_ID.",
    )
    repos_parser.add_argument(
        "--project",
        "-p",
        type=str,
        default=None,
        help="Only show repositories of this project (default: ADO_PROJECT)",
    )

    # mock command - synthetic data
    mock_parser = subparsers.add_parser(
        "mock",
        help="Generate a mock report",
        description="Write randomly generated rows in the report format.",
    )
    mock_parser.add_argument(
        "--count",
        type=int,
        default=50,
        help="Number of rows (default: 50)",
    )
    mock_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible output",
    )
    _add_output_arguments(mock_parser)

    # summary command - monthly trends of an export
    summary_parser = subparsers.add_parser(
        "summary",
        help="Summarize an exported report by month",
        description="Monthly PR counts, median hours to merge and reviewer response hours.",
    )
    summary_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Exported report (default: configured output file)",
    )

    return parser


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (default: ado_detailed_health.csv)",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=EXPORT_FORMATS,
        default=None,
        help="Output format (default: csv)",
    )


def run_command(args: argparse.Namespace, console: Console) -> None:
    """Dispatch a parsed command. Raises HealthReportError on failure."""
    if args.command == "report":
        # Import here to avoid slow startup
        import trio

        from ..report import main as report_main

        config = HealthConfig.load(
            args.config,
            start_date=args.start,
            end_date=args.end,
            output=args.output,
            format=args.format,
            limit=args.limit,
            page_size=args.page_size,
            concurrency=args.concurrency,
        ).validate()
        setup_logging(config.log_file)
        trio.run(report_main, config, console)

    elif args.command == "repos":
        import trio

        from ..ado_client import AzureDevOpsClient
        from ..repos import main as repos_main

        config = HealthConfig.load(args.config, project=args.project).validate(require_repo=False)
        setup_logging(config.log_file)

        async def list_repos():
            client = AzureDevOpsClient(config.org_url, config.token, api_version=config.api_version)
            async with client:
                await repos_main(client, config.project, console)

        console.print(f"[dim]Connecting to {config.org_url}...[/]")
        trio.run(list_repos)

    elif args.command == "mock":
        from ..export import write_rows
        from ..mock_data import generate_mock_rows

        # Mock data takes no connection or date settings from the environment
        config = HealthConfig.load(args.config, env={}, output=args.output, format=args.format)
        rows = generate_mock_rows(count=args.count, seed=args.seed)
        write_rows(rows, config.output, config.format)
        console.print(f"[green]Mock data generated: {config.output} ({len(rows)} rows)[/]")

    elif args.command == "summary":
        from ..summary import main as summary_main

        path = args.path or HealthConfig.load(args.config, env={}).output
        summary_main(path, console)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for adohealth."""
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        run_command(args, console)
    except HealthReportError as e:
        console.print(f"[bold red]Error:[/] {escape(e.message)}")
        if isinstance(e, UpstreamError) and e.status_code == 401:
            console.print("[dim]Tip: check that ADO_PAT is valid and has Code (Read) scope.[/]")
        sys.exit(1)


if __name__ == "__main__":
    main()
