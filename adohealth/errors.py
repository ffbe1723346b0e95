"""Exception classes for health report generation."""


class HealthReportError(Exception):
    """Base exception for all report errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(HealthReportError):
    """Raised when a required setting is missing or invalid."""

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR") -> None:
        super().__init__(code, message)


class MalformedDateError(ConfigurationError):
    """Raised when a date filter cannot be parsed.

    Bad dates almost always mean bad configuration, so the run is rejected
    before any request is made.
    """

    def __init__(self, name: str, value: str, reason: str | None = None) -> None:
        self.name = name
        self.value = value
        detail = f"Invalid {name}: {value!r}"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(detail, code="MALFORMED_DATE")


class UpstreamError(HealthReportError):
    """Raised when Azure DevOps is unreachable or rejects a request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__("UPSTREAM_ERROR", message)
