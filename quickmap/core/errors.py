"""Error taxonomy shared by services and the HTTP boundary.

Every error carries the HTTP status it maps to and an optional payload of
diagnostic context that the exception handler merges into the response body.
"""

from typing import Any


class QuickMapError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_payload(self) -> dict[str, Any]:
        return {"success": False, "error": self.message, **self.context}


class AuthError(QuickMapError):
    """Missing, invalid or unverifiable credential."""

    status_code = 401


class ValidationError(QuickMapError):
    """Required input is missing or empty."""

    status_code = 400


class EmptyModelResponse(QuickMapError):
    """The completion endpoint returned nothing usable."""

    status_code = 502

    def __init__(self, message: str = "Empty response from language model") -> None:
        super().__init__(message)


class MalformedModelResponse(QuickMapError):
    """The completion text could not be decoded into a roadmap.

    The offending text is kept verbatim in ``raw_text`` for diagnosis.
    """

    status_code = 502

    def __init__(self, raw_text: str, message: str = "Failed to parse roadmap JSON") -> None:
        super().__init__(message, raw=raw_text)
        self.raw_text = raw_text


class CompletionRequestError(QuickMapError):
    """The completion endpoint failed or timed out."""

    status_code = 502


class PersistenceFailure(QuickMapError):
    """A store read or write failed; the store message is passed through."""

    status_code = 500

    def __init__(self, message: str, plan_id: str | None = None) -> None:
        if plan_id is not None:
            super().__init__(message, plan_id=plan_id)
        else:
            super().__init__(message)
        self.plan_id = plan_id


class NotFound(QuickMapError):
    """Entity is absent or not owned by the requester."""

    status_code = 404


def store_message(exc: Exception) -> str:
    """The driver's own error text, without the SQL statement and parameters."""
    return str(getattr(exc, "orig", None) or exc)
