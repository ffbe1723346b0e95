"""Configuration for Azure DevOps health reports.

Settings are resolved once at startup and passed around explicitly.

Priority (highest first):
1. CLI arguments
2. Environment variables (a local .env is loaded first)
3. adohealth.yaml config
4. Defaults
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import UTC, date, datetime, time
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError, MalformedDateError

DEFAULT_OUTPUT = Path("ado_detailed_health.csv")
DEFAULT_API_VERSION = "7.1"  # searchCriteria.minTime/maxTime need 7.1
DEFAULT_PAGE_SIZE = 100  # Max items per API page
DEFAULT_CONCURRENCY = 4  # PRs processed concurrently
CONFIG_CANDIDATES = ["adohealth.yaml", ".adohealth.yaml", "adohealth.yml", ".adohealth.yml"]
EXPORT_FORMATS = ("csv", "parquet")

# Environment variable -> config field
ENV_VARS = {
    "ADO_ORG_URL": "org_url",
    "ADO_PAT": "token",
    "ADO_REPO_ID": "repo_id",
    "ADO_PROJECT": "project",
    "ADO_API_VERSION": "api_version",
    "START_DATE": "start_date",
    "END_DATE": "end_date",
}

# Values shipped in the sample .env
PLACEHOLDERS = ("your-org", "your_personal_access_token", "your_repo_id", "your_project_name")


def get_cache_dir() -> Path:
    """Get the global cache directory for adohealth logs."""
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / "adohealth"
    return Path.home() / ".cache" / "adohealth"


def setup_logging(log_file: Path | None = None) -> logging.Logger:
    """Setup file logging for debugging."""
    log_file = log_file or get_cache_dir() / "adohealth.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode="a"),
        ],
    )
    return logging.getLogger("adohealth")


def parse_date(
    name: str, value: str | date | datetime | None, end_of_day: bool = False
) -> datetime | None:
    """Parse an ISO date or datetime into an aware UTC datetime.

    With ``end_of_day`` a bare date means the last microsecond of that day,
    so an end date includes everything created on it.

    Raises MalformedDateError for anything unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = _day_bound(value, end_of_day)
    elif isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                parsed = _day_bound(date.fromisoformat(text), end_of_day)
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise MalformedDateError(name, value, str(e)) from e
    else:
        raise MalformedDateError(name, repr(value), "expected an ISO date string")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _day_bound(day: date, end_of_day: bool) -> datetime:
    if end_of_day:
        return datetime.combine(day, time.max)
    return datetime(day.year, day.month, day.day)


def _is_placeholder(value: str | None) -> bool:
    return bool(value) and any(p in value for p in PLACEHOLDERS)


@dataclass
class HealthConfig:
    """All settings for one report run."""

    org_url: str | None = None
    token: str | None = None
    repo_id: str | None = None
    project: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    api_version: str = DEFAULT_API_VERSION
    page_size: int = DEFAULT_PAGE_SIZE
    limit: int | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    output: Path = field(default_factory=lambda: DEFAULT_OUTPUT)
    format: str = "csv"
    log_file: Path | None = None

    @classmethod
    def load(
        cls,
        path: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> HealthConfig:
        """Resolve config from file, environment and explicit overrides.

        Overrides set to None are ignored so argparse defaults don't mask
        lower priority sources.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        config = cls.from_file(path)

        env_values = {
            attr: env[name] for name, attr in ENV_VARS.items() if env.get(name)
        }
        config = config.merge(env_values)
        config = config.merge({k: v for k, v in overrides.items() if v is not None})
        return config

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> HealthConfig:
        """Load config from YAML file or return defaults."""
        if path is None:
            for candidate in CONFIG_CANDIDATES:
                if Path(candidate).exists():
                    path = candidate
                    break
        elif not Path(path).exists():
            raise ConfigurationError(f"Config file not found: {path}")

        if path is None:
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HealthConfig:
        """Create config from dictionary (e.g., parsed YAML).

        Accepts flat keys or an ``azure_devops`` section for connection
        settings.
        """
        flat = dict(data.get("azure_devops") or {})
        flat.update({k: v for k, v in data.items() if k != "azure_devops"})
        return cls().merge(flat)

    def merge(self, values: Mapping[str, Any]) -> HealthConfig:
        """Return a copy with the given values applied and coerced."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")

        coerced: dict[str, Any] = {}
        for key, value in values.items():
            if key in ("start_date", "end_date"):
                value = parse_date(key, value, end_of_day=key == "end_date")
            elif key in ("page_size", "limit", "concurrency"):
                try:
                    value = int(value)
                except (TypeError, ValueError) as e:
                    raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e
            elif key in ("output", "log_file"):
                value = Path(value)
            elif isinstance(value, str):
                value = value.strip()
            coerced[key] = value
        return replace(self, **coerced)

    def validate(self, require_repo: bool = True) -> HealthConfig:
        """Check settings once, before any network call."""
        missing = []
        if not self.org_url or _is_placeholder(self.org_url):
            missing.append("ADO_ORG_URL")
        if not self.token or _is_placeholder(self.token):
            missing.append("ADO_PAT")
        if require_repo and (not self.repo_id or _is_placeholder(self.repo_id)):
            missing.append("ADO_REPO_ID")
        if missing:
            raise ConfigurationError(f"Missing settings: {', '.join(missing)}")
        if _is_placeholder(self.project):
            self.project = None

        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise MalformedDateError(
                "date range",
                f"{self.start_date.date()}..{self.end_date.date()}",
                "start date is after end date",
            )
        if self.page_size <= 0:
            raise ConfigurationError("page_size must be positive")
        if self.concurrency <= 0:
            raise ConfigurationError("concurrency must be positive")
        if self.limit is not None and self.limit <= 0:
            raise ConfigurationError("limit must be positive")
        if self.format not in EXPORT_FORMATS:
            raise ConfigurationError(
                f"format must be one of {', '.join(EXPORT_FORMATS)}, got {self.format!r}"
            )
        return self

    @property
    def base_url(self) -> str:
        """Organisation URL with the project appended when one is set."""
        base = (self.org_url or "").rstrip("/")
        if self.project and not _is_placeholder(self.project):
            return f"{base}/{self.project}"
        return base
