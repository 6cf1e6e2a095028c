"""Error taxonomy shared by the clients, the research core and the HTTP layer."""


class ResearchError(Exception):
    """Base class for errors surfaced to the user."""


class ConfigurationError(ResearchError):
    """A credential is missing or still holds its template placeholder.

    Raised before any network call is made and never retried.
    """


class TransportError(ResearchError):
    """An upstream API call failed (network error or non-success status)."""

    def __init__(self, message: str, status: int | None = None, provider: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.status = status
        self.provider = provider

    @property
    def is_auth_failure(self) -> bool:
        return self.status in (401, 403)

    def __str__(self) -> str:
        if self.status is None:
            return f"{self.provider} API error: {self.message}"
        return f"{self.provider} API error: {self.status} - {self.message}"


class EmptySelectionError(ResearchError):
    """Report generation was requested with nothing selected."""


class NoReportError(ResearchError):
    """Export was requested before any report was generated."""
