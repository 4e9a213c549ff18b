"""Error reporting for the ``wuxing-tea`` command line tool."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

__all__ = [
    "CliError",
    "ErrorPayload",
    "build_error_payload",
    "log_cli_error",
]

_STATUS_BY_CATEGORY: Mapping[str, int] = MappingProxyType(
    {
        "runtime": 1,
        "usage": 2,
        "io": 3,
        "not_found": 4,
        "invalid_input": 5,
    }
)

_FALLBACK_CATEGORY = "runtime"
_LOGGER_NAME = "wuxing_tea.cli"


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What the CLI reports when a command fails."""

    status_code: int
    category: str
    message: str
    context: Mapping[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }

    def to_json(self) -> str:
        return json.dumps({"error": self.as_dict()}, sort_keys=True)


def _scalar_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    # Paths and other objects are stringified so the payload stays JSON-safe.
    safe: dict[str, Any] = {}
    for key, value in (context or {}).items():
        if value is None or isinstance(value, (str, int, float, bool)):
            safe[str(key)] = value
        else:
            safe[str(key)] = str(value)
    return safe


def build_error_payload(
    message: str,
    *,
    category: str = _FALLBACK_CATEGORY,
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    category = category or _FALLBACK_CATEGORY
    if status_code is None:
        status_code = _STATUS_BY_CATEGORY.get(category, _STATUS_BY_CATEGORY[_FALLBACK_CATEGORY])
    return ErrorPayload(
        status_code=status_code,
        category=category,
        message=message,
        context=MappingProxyType(_scalar_context(context)),
    )


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Log ``payload`` at error level with its context as structured extras."""

    (logger or logging.getLogger(_LOGGER_NAME)).error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Failure raised by command handlers; carries an exit status."""

    __slots__ = ("category", "status_code", "context", "payload", "logged")

    def __init__(
        self,
        message: str,
        *,
        category: str = _FALLBACK_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message, category=category, status_code=status_code, context=context
        )
        self.category = self.payload.category
        self.status_code = self.payload.status_code
        self.context = dict(self.payload.context)
        self.logged = logged

    @classmethod
    def from_exception(
        cls,
        message: str,
        cause: BaseException,
        *,
        category: str = _FALLBACK_CATEGORY,
        context: Optional[Mapping[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "CliError":
        """Build an error from ``cause`` and log it with its traceback."""

        error = cls(message, category=category, context=context)
        log_cli_error(error.payload, logger=logger, exc_info=cause)
        error.logged = True
        return error
