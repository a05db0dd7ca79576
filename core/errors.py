"""Content errors and HTTP error response helpers."""

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

ERROR_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


class ContentError(Exception):
    """Base class for problems loading site content."""
    pass


class ContentNotFoundError(ContentError):
    """Raised when a manual page or content file does not exist."""

    def __init__(self, name: str, kind: str = "page"):
        self.name = name
        self.kind = kind
        super().__init__(f"Unknown {kind}: {name}")


class ContentValidationError(ContentError):
    """
    Raised when a content file fails model validation.

    Wraps the pydantic errors so callers only need to handle ContentError.
    """

    def __init__(self, source: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.source = source
        self.errors = errors or []

        msg = f"Invalid content in {source}"
        if self.errors:
            first = self.errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            msg += f": {location} {first.get('msg', '')}".rstrip()
            if len(self.errors) > 1:
                msg += f" (+{len(self.errors) - 1} more)"

        super().__init__(msg)


def error_response(code: int, detail: str) -> JSONResponse:
    """Create a JSON error body for clients that asked for JSON."""
    body: Dict[str, Any] = {
        "error": ERROR_TITLES.get(code, "Error"),
        "code": code,
        "detail": detail,
    }
    return JSONResponse(status_code=code, content=body)


def wants_json(accept_header: Optional[str]) -> bool:
    """True when the Accept header prefers JSON over HTML."""
    accept = (accept_header or "").lower()
    if "application/json" not in accept:
        return False
    if "text/html" not in accept:
        return True
    return accept.index("application/json") < accept.index("text/html")
