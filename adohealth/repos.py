"""List repositories to look up the repo id for reports."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from .ado_client import AzureDevOpsClient


@dataclass
class RepoInfo:
    """Repository information."""

    name: str
    id: str
    project: str | None = None


def extract_repo(repo_data: dict) -> RepoInfo:
    """Extract repository info from Azure DevOps API response."""
    project = repo_data.get("project") or {}
    return RepoInfo(
        name=repo_data.get("name") or "",
        id=repo_data.get("id") or "",
        project=project.get("name"),
    )


async def list_repositories(client: AzureDevOpsClient, project: str | None = None) -> list[RepoInfo]:
    """Get repositories sorted by name, optionally only those of one project."""
    repos = [extract_repo(r) for r in await client.get_repositories()]
    if project:
        repos = [r for r in repos if r.project == project]
    return sorted(repos, key=lambda r: r.name.lower())


def build_repo_table(repos: list[RepoInfo]) -> Table:
    table = Table(title="Available Repositories")
    table.add_column("Name", style="cyan")
    table.add_column("Project", style="dim")
    table.add_column("ID", style="green")
    for repo in repos:
        table.add_row(repo.name, repo.project or "-", repo.id)
    return table


async def main(client: AzureDevOpsClient, project: str | None = None, console: Console | None = None) -> list[RepoInfo]:
    """Print repositories as a table."""
    console = console or Console()
    repos = await list_repositories(client, project)

    if not repos:
        if project:
            console.print(
                f"[yellow]No repositories found for project '{project}'. "
                "Unset ADO_PROJECT to see all.[/]"
            )
        else:
            console.print("[yellow]No repositories found. Check your PAT has Code (Read) scope.[/]")
        return repos

    console.print(build_repo_table(repos))
    return repos
