from __future__ import annotations


class RecruitClientError(Exception):
    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ApiError(RecruitClientError):
    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code


class NotFound(ApiError):
    def __init__(self, message: str = "Not found") -> None:
        super().__init__(404, message)


class Unauthorized(ApiError):
    def __init__(self, message: str = "Unauthorized", status_code: int = 401) -> None:
        super().__init__(status_code, message)


class TransportFailure(RecruitClientError):
    """The request never produced a response (connection, timeout, protocol)."""


class ValidationFailure(RecruitClientError):
    """Input rejected locally; no request was sent."""


class MutationFailure(RecruitClientError):
    """A create/update/delete request was rejected."""


class StaleStateGuard(RecruitClientError):
    """The freshest server state no longer contains the targeted entry."""


def describe_error(exc: BaseException) -> str:
    if isinstance(exc, ApiError):
        return f"Error: {exc.status_code} - {exc.message}"
    if isinstance(exc, MutationFailure) and isinstance(exc.__cause__, ApiError):
        return describe_error(exc.__cause__)
    return str(exc) or exc.__class__.__name__
