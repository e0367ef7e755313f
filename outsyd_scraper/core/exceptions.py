"""Unified exception hierarchy for the Outsyd scraper.

Exception categories:
- Configuration errors (missing credentials) - fatal to the invocation
- Request errors (bad url/country, disallowed domain) - fatal, HTTP 400
- Access errors (no session, not an admin) - fatal, HTTP 401/403
- Fetch errors (Firecrawl failures) - per source, recovered
- Extraction errors (LLM failures) - per source, recovered
- Parse errors (malformed payloads, rejected candidates) - per source/candidate, recovered
- Storage errors (Supabase failures) - per candidate, recovered
"""


class OutsydError(Exception):
    """Base exception for all Outsyd scraper errors."""

    def __init__(self, message: str, source: str | None = None, details: dict | None = None):
        self.source = source
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.source:
            msg = f"[{self.source}] {msg}"
        return msg

    @property
    def message(self) -> str:
        """Message without the source prefix (safe to show to callers)."""
        return super().__str__()


# ============================================================
# CONFIGURATION ERRORS
# ============================================================


class ConfigurationError(OutsydError):
    """Base class for configuration-related errors."""
    pass


class MissingCredentialsError(ConfigurationError):
    """Raised when credentials for a required external service are missing."""

    def __init__(self, settings: list[str]):
        self.settings = settings
        super().__init__(
            f"Missing configuration: {', '.join(settings)}",
            details={"settings": settings},
        )


# ============================================================
# REQUEST ERRORS
# ============================================================


class RequestError(OutsydError):
    """Base class for caller-supplied input errors."""
    pass


class InvalidRequestError(RequestError):
    """Raised when the request body has the wrong shape."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        details = {"field": field} if field else {}
        super().__init__(message, details=details)


class DomainNotAllowedError(RequestError):
    """Raised when a caller asks to scrape a host outside the allowlist."""

    def __init__(self, url: str):
        self.url = url
        super().__init__("URL domain is not an allowed event source", details={"url": url[:500]})


# ============================================================
# ACCESS ERRORS
# ============================================================


class AccessError(OutsydError):
    """Base class for authentication/authorization failures."""
    pass


class AuthenticationError(AccessError):
    """Raised when the caller presents no valid credentials."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AuthorizationError(AccessError):
    """Raised when an authenticated user lacks the required role."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Forbidden: {role} role required", details={"role": role})


# ============================================================
# FETCH ERRORS
# ============================================================


class FetchError(OutsydError):
    """Base class for content fetching errors."""
    pass


class FirecrawlError(FetchError):
    """Raised for Firecrawl-specific errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        source: str | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, source=source, details={"status_code": status_code})


# ============================================================
# EXTRACTION ERRORS
# ============================================================


class ExtractionError(OutsydError):
    """Base class for LLM extraction errors."""
    pass


class LLMError(ExtractionError):
    """Raised for LLM API failures."""

    def __init__(
        self,
        message: str,
        model: str | None = None,
        provider: str | None = None,
        source: str | None = None,
    ):
        self.model = model
        self.provider = provider
        super().__init__(
            message,
            source=source,
            details={"model": model, "provider": provider},
        )


# ============================================================
# PARSE ERRORS
# ============================================================


class ParseError(OutsydError):
    """Base class for data parsing errors."""
    pass


class JSONParseError(ParseError):
    """Raised when the extractor payload cannot be decoded."""

    def __init__(self, message: str, raw_data: str | None = None, source: str | None = None):
        self.raw_data = raw_data[:200] if raw_data else None
        super().__init__(message, source=source, details={"raw_data_preview": self.raw_data})


class CandidateRejectedError(ParseError):
    """Raised when an extracted candidate fails sanitization."""

    def __init__(self, reason: str, field: str | None = None, title: str | None = None):
        self.reason = reason
        self.field = field
        self.title = title
        super().__init__(reason, details={"field": field, "title": title})


class InvalidDateError(CandidateRejectedError):
    """Raised when a candidate date is unparsable or already past."""

    def __init__(self, value: str, title: str | None = None):
        self.value = value
        super().__init__(f"Invalid or past date: {value!r}", field="date", title=title)


# ============================================================
# STORAGE ERRORS
# ============================================================


class StorageError(OutsydError):
    """Base class for storage-related errors."""
    pass


class SupabaseError(StorageError):
    """Raised for Supabase-specific errors."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        table: str | None = None,
        source: str | None = None,
    ):
        self.operation = operation
        self.table = table
        super().__init__(
            message,
            source=source,
            details={"operation": operation, "table": table},
        )
