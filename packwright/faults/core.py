"""
Packwright faults - fault base type, domains and severities.

A fault is an exception with a stable ``code``, a ``domain`` naming the
subsystem that raised it, a ``severity`` and free-form ``metadata``.
Subclasses may declare ``code``, ``message`` and ``domain`` as class
attributes instead of passing them.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """How serious a fault is; selects the level it is logged at."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def log_level(self) -> int:
        return _LOG_LEVELS[self]


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


class FaultDomain(str, Enum):
    """Subsystem a fault belongs to."""

    CONFIG = "config"          # settings, archive shapes and names
    ARCHIVE = "archive"        # archive container and builders
    RESOLUTION = "resolution"  # descriptors, coordinates, repositories

    def __str__(self) -> str:
        return self.value


# Severity used when a fault does not choose one
DEFAULT_SEVERITY: Dict[FaultDomain, Severity] = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.ARCHIVE: Severity.ERROR,
    FaultDomain.RESOLUTION: Severity.WARN,
}


# ============================================================================
# Fault
# ============================================================================

class Fault(Exception):
    """
    Structured packwright error.

    Example:
        ```python
        class RepositoryLocked(Fault):
            code = "REPOSITORY_LOCKED"
            message = "Local repository is locked by another build"
            domain = FaultDomain.RESOLUTION

        raise RepositoryLocked(metadata={"lock": str(lock_path)})
        ```
    """

    code: Optional[str] = None
    message: Optional[str] = None
    domain: Optional[FaultDomain] = None

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        *,
        domain: Optional[FaultDomain] = None,
        severity: Optional[Severity] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.code = code or type(self).code
        self.message = message or type(self).message
        self.domain = domain or type(self).domain
        missing = [name for name in ("code", "message", "domain") if getattr(self, name) is None]
        if missing:
            raise TypeError(f"{type(self).__name__} requires {', '.join(missing)}")

        super().__init__(self.message)
        self.severity = severity or DEFAULT_SEVERITY.get(self.domain, Severity.ERROR)
        self.metadata = dict(metadata or {})

    def log(self, logger: logging.Logger, note: str = "") -> None:
        """Log this fault at its severity's level."""
        if note:
            logger.log(self.severity.log_level, "%s; %s", self.message, note)
        else:
            logger.log(self.severity.log_level, "%s", self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form for structured logs and CLI output."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "metadata": dict(self.metadata),
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code} {self.domain.value}/{self.severity.value}>"
