"""Azure DevOps Git REST API client.

Uses httpx.AsyncClient; callers drive it from trio.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any

import httpx

from .config import DEFAULT_API_VERSION, DEFAULT_PAGE_SIZE, HealthConfig
from .errors import UpstreamError

logger = logging.getLogger(__name__)


def format_query_time(dt: datetime) -> str:
    """Render a datetime the way searchCriteria expects it."""
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class AzureDevOpsClient:
    """Async Azure DevOps REST client.

    Authenticates with a personal access token sent as basic auth. There is
    no retry or rate limit handling: any failed request raises UpstreamError
    and the caller aborts the run.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            base_url: Organisation URL, optionally with the project appended
                (e.g. https://dev.azure.com/my-org/my-project)
            token: Personal access token
            api_version: REST api-version sent with every request
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.api_version = api_version
        self.timeout = timeout
        self.client: httpx.AsyncClient | None = None
        self._request_count = 0

    @classmethod
    def from_config(cls, config: HealthConfig) -> AzureDevOpsClient:
        return cls(config.base_url, config.token or "", api_version=config.api_version)

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=("", self.token),
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        return self

    async def __aexit__(self, *args):
        if self.client:
            await self.client.aclose()

    @property
    def request_count(self) -> int:
        return self._request_count

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
    ) -> httpx.Response:
        """Make a single request, mapping every failure to UpstreamError."""
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        request_params = {"api-version": self.api_version}
        if params:
            request_params.update(params)

        try:
            response = await self.client.request(method, path, params=request_params)
        except httpx.RequestError as e:
            logger.error(f"Request to {path} failed: {type(e).__name__}: {e}")
            raise UpstreamError(f"Could not reach Azure DevOps: {e}", url=f"{self.base_url}{path}") from e

        self._request_count += 1

        if response.is_error:
            logger.error(f"{method} {response.url} returned {response.status_code}")
            raise UpstreamError(
                f"Azure DevOps rejected the request ({response.status_code} {response.reason_phrase})",
                status_code=response.status_code,
                url=str(response.url),
            )
        # Expired or wrong PATs often get a sign-in page with status 203
        if "json" not in response.headers.get("content-type", "json"):
            raise UpstreamError(
                "Azure DevOps returned a non-JSON response (check the personal access token)",
                status_code=response.status_code,
                url=str(response.url),
            )
        return response

    async def get(self, path: str, params: dict | None = None) -> Any:
        """GET request returning JSON."""
        response = await self._request("GET", path, params=params)
        return response.json()

    async def get_list(self, path: str, params: dict | None = None) -> list[dict]:
        """GET a collection endpoint and return its ``value`` list."""
        data = await self.get(path, params)
        return data.get("value", []) if isinstance(data, dict) else []

    async def paginate(
        self,
        path: str,
        params: dict | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: int | None = None,
    ) -> AsyncGenerator[dict]:
        """Page through a collection with $top/$skip, yielding each item."""
        params = params.copy() if params else {}
        skip = 0
        yielded = 0

        while True:
            params["$top"] = page_size
            params["$skip"] = skip
            items = await self.get_list(path, params)

            for item in items:
                yield item
                yielded += 1
                if limit and yielded >= limit:
                    return

            if len(items) < page_size:
                break

            skip += page_size

    async def get_pull_requests(
        self,
        repo_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        limit: int | None = None,
    ) -> AsyncGenerator[dict]:
        """Get pull requests of every status, optionally within a creation date range."""
        path = f"/_apis/git/repositories/{repo_id}/pullrequests"
        params = {"searchCriteria.status": "all"}
        if start_date:
            params["searchCriteria.minTime"] = format_query_time(start_date)
        if end_date:
            params["searchCriteria.maxTime"] = format_query_time(end_date)

        async for pr in self.paginate(path, params, page_size=page_size, limit=limit):
            yield pr

    async def get_threads(self, repo_id: str, pr_id: int) -> list[dict]:
        """Get all comment threads of a PR."""
        path = f"/_apis/git/repositories/{repo_id}/pullRequests/{pr_id}/threads"
        return await self.get_list(path)

    async def get_repositories(self) -> list[dict]:
        """Get repositories visible under the base URL."""
        return await self.get_list("/_apis/git/repositories")
