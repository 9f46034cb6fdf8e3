"""
Dependency coordinates and scopes.

Canonical coordinate strings follow Maven::

    group:artifact
    group:artifact:version
    group:artifact:packaging:version
    group:artifact:packaging:classifier:version

The version may be left empty when the project descriptor supplies it,
e.g. ``org.acme:core:jar:tests:``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from ..faults import CoordinateFault, ScopeFault


class ScopeType(str, Enum):
    """Dependency scopes understood by the resolver."""

    COMPILE = "compile"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    TEST = "test"
    SYSTEM = "system"
    IMPORT = "import"

    @classmethod
    def coerce(cls, value: Union["ScopeType", str]) -> "ScopeType":
        """Accept members or their (case-insensitive) values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ScopeFault(str(value), (s.value for s in cls)) from None


# Scopes followed when walking the dependencies of a resolved artifact.
TRANSITIVE_SCOPES = frozenset({ScopeType.COMPILE, ScopeType.RUNTIME})


@dataclass(frozen=True)
class DependencyCoordinate:
    """Identifies a dependency query; the version may be left to the descriptor."""

    group: str
    artifact: str
    packaging: str = ""
    classifier: str = ""
    version: str = ""

    def __post_init__(self) -> None:
        if not self.group or not self.artifact:
            raise CoordinateFault(f"{self.group}:{self.artifact}", "group and artifact are required")

    @property
    def key(self) -> tuple[str, str]:
        """``(group, artifact)``, matched by exclusions and management."""
        return (self.group, self.artifact)

    @property
    def identity(self) -> tuple[str, str, str, str]:
        """``(group, artifact, type, classifier)``; distinct values are distinct artifacts."""
        return (self.group, self.artifact, self.type, self.classifier)

    @property
    def type(self) -> str:
        return self.packaging or "jar"

    @property
    def canonical(self) -> str:
        parts = [self.group, self.artifact]
        if self.classifier:
            parts += [self.type, self.classifier, self.version]
        elif self.packaging:
            parts += [self.packaging, self.version]
        elif self.version:
            parts.append(self.version)
        return ":".join(parts)

    def with_version(self, version: str) -> "DependencyCoordinate":
        return replace(self, version=version)

    @classmethod
    def parse(cls, text: str) -> "DependencyCoordinate":
        """
        Parse a canonical coordinate string.

        Raises:
            CoordinateFault: On a wrong number of segments or empty
                group/artifact.
        """
        parts = [p.strip() for p in text.strip().split(":")]
        if len(parts) == 2:
            group, artifact = parts
            return cls(group, artifact)
        if len(parts) == 3:
            group, artifact, version = parts
            return cls(group, artifact, version=version)
        if len(parts) == 4:
            group, artifact, packaging, version = parts
            return cls(group, artifact, packaging=packaging, version=version)
        if len(parts) == 5:
            group, artifact, packaging, classifier, version = parts
            return cls(group, artifact, packaging, classifier, version)
        raise CoordinateFault(text, "expected 2 to 5 ':'-separated segments")

    def __str__(self) -> str:
        return self.canonical
