"""Errors for Kubernetes API access and helpers to filter them."""

from __future__ import annotations

from collections.abc import Callable

ErrorIs = Callable[[BaseException | None], bool]


class ResourceError(Exception):
    """An error that may wrap another error with extra context."""

    def __init__(self, message: str, wrapped: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.__cause__ = wrapped

    def __str__(self) -> str:
        if self.__cause__ is not None:
            return f"{self.message}: {self.__cause__}"
        return self.message


class ApiError(Exception):
    """An error reported by the Kubernetes API server."""

    def __init__(self, message: str, code: int = 500, reason: str = "InternalError") -> None:
        super().__init__(message)
        self.code = code
        self.reason = reason


class NotFoundError(ApiError):
    """The requested resource does not exist."""

    def __init__(self, resource: str = "", name: str = "") -> None:
        super().__init__(f'{resource} "{name}" not found', code=404, reason="NotFound")
        self.resource = resource
        self.name = name


class BadRequestError(ApiError):
    """The request was not valid."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=400, reason="BadRequest")


def wrap(error: BaseException | None, message: str) -> ResourceError | None:
    """Wrap the error with a message; None stays None."""
    if error is None:
        return None
    return ResourceError(message, error)


def cause(error: BaseException | None) -> BaseException | None:
    """Return the innermost error beneath any ResourceError wrapping."""
    while isinstance(error, ResourceError) and error.__cause__ is not None:
        error = error.__cause__
    return error


def _chain(error: BaseException | None):
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        yield error
        error = error.__cause__


def is_not_found(error: BaseException | None) -> bool:
    """Return whether the error is, or wraps, a not-found API error."""
    return any(isinstance(e, NotFoundError) for e in _chain(error))


def ignore(is_: ErrorIs, error: BaseException | None) -> BaseException | None:
    """Return None when ``is_`` matches the error, else the error unchanged."""
    return None if is_(error) else error


def ignore_any(error: BaseException | None, *args: ErrorIs) -> BaseException | None:
    """Return None when any predicate matches the error, else the error."""
    return None if any(is_(error) for is_ in args) else error


def ignore_not_found(error: BaseException | None) -> BaseException | None:
    return ignore(is_not_found, error)


def is_api_error(error: BaseException | None) -> bool:
    return isinstance(error, ApiError)


def is_api_error_wrapped(error: BaseException | None) -> bool:
    """Return whether the error is, or wraps, an API error."""
    return is_api_error(cause(error))