"""Tests for repository listing."""

import pytest
from rich.console import Console

from adohealth.config import HealthConfig
from adohealth.repos import RepoInfo, build_repo_table, extract_repo, list_repositories, main

REPOS = [
    {"id": "id-web", "name": "web", "project": {"name": "Shop"}},
    {"id": "id-api", "name": "Api", "project": {"name": "Shop"}},
    {"id": "id-ops", "name": "ops", "project": {"name": "Platform"}},
]


class FakeClient:
    def __init__(self, repos):
        self.repos = repos

    async def get_repositories(self):
        return self.repos


class TestExtractRepo:
    def test_fields(self):
        assert extract_repo(REPOS[0]) == RepoInfo(name="web", id="id-web", project="Shop")

    def test_missing_project(self):
        assert extract_repo({"id": "x", "name": "solo"}).project is None


class TestListRepositories:
    @pytest.mark.trio
    async def test_sorted_by_name(self):
        repos = await list_repositories(FakeClient(REPOS))
        assert [r.name for r in repos] == ["Api", "ops", "web"]

    @pytest.mark.trio
    async def test_project_filter(self):
        repos = await list_repositories(FakeClient(REPOS), project="Shop")
        assert [r.id for r in repos] == ["id-api", "id-web"]

    @pytest.mark.trio
    async def test_main_prints_table(self):
        console = Console(record=True, width=120)
        repos = await main(FakeClient(REPOS), console=console)
        assert len(repos) == 3
        output = console.export_text()
        assert "Available Repositories" in output
        assert "id-ops" in output

    @pytest.mark.trio
    async def test_main_unknown_project(self):
        console = Console(record=True, width=120)
        repos = await main(FakeClient(REPOS), project="Nope", console=console)
        assert repos == []
        assert "No repositories found for project 'Nope'" in console.export_text()


def test_repo_table_rows():
    table = build_repo_table([RepoInfo(name="web", id="id-web")])
    assert table.row_count == 1


@pytest.mark.trio
async def test_sample_project_setting_lists_everything():
    config = HealthConfig.load(
        env={
            "ADO_ORG_URL": "https://dev.azure.com/contoso",
            "ADO_PAT": "secret",
            "ADO_PROJECT": "your_project_name",
        }
    ).validate(require_repo=False)

    repos = await list_repositories(FakeClient(REPOS), config.project)

    assert len(repos) == 3
