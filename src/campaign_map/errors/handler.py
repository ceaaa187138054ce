"""Central reporting point for recoverable campaign map failures."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from . import DomainError


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


UiCallback = Callable[[str, ErrorSeverity], None]


def default_severity(error: Exception) -> ErrorSeverity:
    """Domain mistakes are warnings; anything touching storage is an error."""

    if isinstance(error, DomainError):
        return ErrorSeverity.WARNING
    return ErrorSeverity.ERROR


class ErrorHandler:
    """Log failures and surface the serious ones to whoever owns the UI."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._ui_callback: Optional[UiCallback] = None

    def register_ui_callback(self, callback: Optional[UiCallback]) -> None:
        self._ui_callback = callback

    def handle(
        self,
        error: Exception,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[dict] = None,
    ) -> ErrorSeverity:
        """Record *error* and return the severity it was reported with."""

        severity = severity or default_severity(error)
        log_method = getattr(self._logger, severity.value, self._logger.error)
        log_method("%s: %s", error.__class__.__name__, error, extra={"context": context or {}})

        if self._ui_callback is not None and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._ui_callback(str(error), severity)
        return severity


__all__ = ["ErrorHandler", "ErrorSeverity", "default_severity"]
