"""
Resolve Stage — descriptor-driven resolution against a local repository.

Usage::

    stage = load_descriptor("pom.xml", ["prod"], repository=LocalRepository("~/.m2/repository"))
    files = (
        stage.with_scopes(ScopeType.COMPILE, ScopeType.RUNTIME)
        .resolve("org.acme:core")
        .with_transitivity()
        .as_files()
    )

The repository uses the Maven directory layout::

    <root>/org/acme/core/1.0/core-1.0.jar
    <root>/org/acme/core/1.0/core-1.0.pom
    <root>/org/acme/core/1.0/core-1.0-tests.jar

Transitive dependencies are walked breadth-first; the first version seen
for a ``group:artifact`` wins (nearest first) and the root project's
``dependencyManagement`` overrides versions found deeper in the graph.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import replace
from pathlib import Path
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple, Union

from ..faults import ArtifactNotFoundFault, VersionNotResolvedFault
from .coordinates import TRANSITIVE_SCOPES, DependencyCoordinate, ScopeType
from .descriptor import (
    DeclaredDependency,
    EffectiveModel,
    ProjectDescriptor,
    build_effective_model,
)

logger = logging.getLogger("packwright.resolver.stage")

# Packaging → file extension for types that differ from their name.
_EXTENSIONS = {
    "bundle": "jar",
    "ejb": "jar",
    "ejb-client": "jar",
    "maven-plugin": "jar",
    "test-jar": "jar",
    "java-source": "jar",
    "javadoc": "jar",
}

# Packaging that implies a classifier when none is given.
_IMPLIED_CLASSIFIERS = {
    "test-jar": "tests",
    "ejb-client": "client",
    "java-source": "sources",
    "javadoc": "javadoc",
}

CoordinateLike = Union[str, DependencyCoordinate]


# ── Repository ──────────────────────────────────────────────────────────


class LocalRepository:
    """
    Maven-layout artifact directory.

    Parsed POMs are memoised per instance; a repository lives only as long
    as the resolve stage that owns it.
    """

    __slots__ = ("root", "_descriptors")

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(os.path.expanduser(str(root)))
        self._descriptors: Dict[Tuple[str, str, str], Optional[ProjectDescriptor]] = {}

    def _version_dir(self, coordinate: DependencyCoordinate) -> Path:
        return (
            self.root.joinpath(*coordinate.group.split("."))
            / coordinate.artifact
            / coordinate.version
        )

    def artifact_path(self, coordinate: DependencyCoordinate) -> Path:
        packaging = coordinate.type
        extension = _EXTENSIONS.get(packaging, packaging)
        classifier = coordinate.classifier or _IMPLIED_CLASSIFIERS.get(packaging, "")
        suffix = f"-{classifier}" if classifier else ""
        filename = f"{coordinate.artifact}-{coordinate.version}{suffix}.{extension}"
        return self._version_dir(coordinate) / filename

    def pom_path(self, coordinate: DependencyCoordinate) -> Path:
        return self._version_dir(coordinate) / f"{coordinate.artifact}-{coordinate.version}.pom"

    def descriptor(self, coordinate: DependencyCoordinate) -> Optional[ProjectDescriptor]:
        """Parsed POM of *coordinate*, or ``None`` when the repository has none."""
        key = (coordinate.group, coordinate.artifact, coordinate.version)
        if key not in self._descriptors:
            path = self.pom_path(coordinate)
            self._descriptors[key] = ProjectDescriptor.parse(path) if path.is_file() else None
        return self._descriptors[key]

    def effective_model(self, coordinate: DependencyCoordinate) -> Optional[EffectiveModel]:
        descriptor = self.descriptor(coordinate)
        if descriptor is None:
            return None
        return build_effective_model(descriptor, parent_lookup=self.descriptor)

    def __repr__(self) -> str:
        return f"LocalRepository({str(self.root)!r})"


# ── Stage ───────────────────────────────────────────────────────────────


def load_descriptor(
    path: Union[str, Path],
    profiles: Iterable[str] = (),
    *,
    repository: LocalRepository,
) -> "ResolveStage":
    """
    Load the project descriptor at *path* with *profiles* active.

    The parent POM is looked up at ``<relativePath>`` first, then in
    *repository*.

    Raises:
        DescriptorFault: If the descriptor is missing or malformed.
    """
    descriptor = ProjectDescriptor.parse(path)
    base = Path(path).parent

    def parent_lookup(coordinate: DependencyCoordinate) -> Optional[ProjectDescriptor]:
        parent = descriptor.parent
        if parent is not None and coordinate.key == parent.key:
            local = base / descriptor.parent_relative_path
            if local.is_dir():
                local = local / "pom.xml"
            if local.is_file():
                candidate = ProjectDescriptor.parse(local)
                if candidate.coordinate.key == coordinate.key:
                    return candidate
        return repository.descriptor(coordinate)

    model = build_effective_model(
        descriptor,
        profiles,
        parent_lookup=parent_lookup,
        bom_lookup=repository.descriptor,
    )
    logger.debug("Loaded %s (%s)", path, model.coordinate)
    return ResolveStage(model, repository)


class ResolveStage:
    """A loaded descriptor, optionally restricted to some scopes."""

    __slots__ = ("model", "repository", "scopes")

    def __init__(
        self,
        model: EffectiveModel,
        repository: LocalRepository,
        scopes: FrozenSet[ScopeType] = frozenset(),
    ) -> None:
        self.model = model
        self.repository = repository
        self.scopes = scopes

    def with_scopes(self, *scopes: Union[ScopeType, str]) -> "ResolveStage":
        """Restrict eligible declared dependencies to *scopes*."""
        return ResolveStage(
            self.model,
            self.repository,
            self.scopes | {ScopeType.coerce(s) for s in scopes},
        )

    @property
    def eligible(self) -> List[DeclaredDependency]:
        """Declared dependencies that pass the scope filter."""
        if not self.scopes:
            return list(self.model.dependencies)
        return [d for d in self.model.dependencies if d.effective_scope in self.scopes]

    def resolve(self, coordinate: CoordinateLike) -> "ResolvedFiles":
        """
        Pin the version of *coordinate*.

        The version is taken from the coordinate itself, then from the
        matching eligible declared dependency. ``dependencyManagement``
        only applies to coordinates the project does not declare, so a
        dependency excluded by the scope filter stays unresolved.

        Raises:
            CoordinateFault: If the string cannot be parsed.
            VersionNotResolvedFault: If no version is known.
        """
        if isinstance(coordinate, str):
            coordinate = DependencyCoordinate.parse(coordinate)

        declared = self._declared(coordinate, self.eligible)
        if declared is not None and not (coordinate.packaging or coordinate.classifier):
            coordinate = replace(
                coordinate,
                packaging=declared.coordinate.packaging,
                classifier=declared.coordinate.classifier,
            )
        exclusions: FrozenSet[Tuple[str, str]] = declared.exclusions if declared else frozenset()
        version = coordinate.version
        if not version and declared is not None:
            version = declared.coordinate.version
        if not version and self._declared(coordinate, self.model.dependencies) is None:
            rule = self.model.managed_for(coordinate)
            if rule is not None:
                version = rule.coordinate.version
                exclusions = exclusions | rule.exclusions
        if not version:
            raise VersionNotResolvedFault(coordinate.canonical)

        return ResolvedFiles(self, coordinate.with_version(version), exclusions)

    def _declared(
        self,
        coordinate: DependencyCoordinate,
        candidates: Iterable[DeclaredDependency],
    ) -> Optional[DeclaredDependency]:
        for dep in candidates:
            c = dep.coordinate
            if c.key != coordinate.key:
                continue
            if coordinate.classifier and c.classifier != coordinate.classifier:
                continue
            if coordinate.packaging and c.type != coordinate.type:
                continue
            return dep
        return None

    def __repr__(self) -> str:
        scopes = ",".join(sorted(s.value for s in self.scopes)) or "*"
        return f"<ResolveStage {self.model.coordinate} scopes={scopes}>"


class ResolvedFiles:
    """A pinned coordinate awaiting a transitivity strategy."""

    __slots__ = ("_stage", "coordinate", "_exclusions")

    def __init__(
        self,
        stage: ResolveStage,
        coordinate: DependencyCoordinate,
        exclusions: FrozenSet[Tuple[str, str]] = frozenset(),
    ) -> None:
        self._stage = stage
        self.coordinate = coordinate
        self._exclusions = exclusions

    def with_transitivity(self) -> "ResolvedArtifacts":
        return ResolvedArtifacts(self._stage, self.coordinate, self._exclusions, transitive=True)

    def without_transitivity(self) -> "ResolvedArtifacts":
        return ResolvedArtifacts(self._stage, self.coordinate, self._exclusions, transitive=False)


class ResolvedArtifacts:
    """Result of a resolution; the graph is walked on access."""

    __slots__ = ("_stage", "_root", "_exclusions", "_transitive")

    def __init__(
        self,
        stage: ResolveStage,
        root: DependencyCoordinate,
        exclusions: FrozenSet[Tuple[str, str]],
        *,
        transitive: bool,
    ) -> None:
        self._stage = stage
        self._root = root
        self._exclusions = exclusions
        self._transitive = transitive

    def as_coordinates(self) -> List[DependencyCoordinate]:
        """Resolved coordinates, nearest first."""
        repository = self._stage.repository
        managed = self._stage.model
        queue: Deque[Tuple[DependencyCoordinate, FrozenSet[Tuple[str, str]]]] = deque(
            [(self._root, self._exclusions)]
        )
        seen: Set[Tuple[str, str, str, str]] = set()
        result: List[DependencyCoordinate] = []

        while queue:
            coordinate, exclusions = queue.popleft()
            if coordinate.identity in seen:
                continue
            seen.add(coordinate.identity)
            result.append(coordinate)
            if not self._transitive:
                break

            model = repository.effective_model(coordinate)
            if model is None:
                continue
            for dep in model.dependencies:
                if dep.optional or dep.effective_scope not in TRANSITIVE_SCOPES:
                    continue
                if _excluded(dep.coordinate.key, exclusions) or dep.coordinate.identity in seen:
                    continue
                child = dep.coordinate
                rule = managed.managed_for(child)
                if rule is not None and rule.coordinate.version:
                    child = child.with_version(rule.coordinate.version)
                if not child.version:
                    raise VersionNotResolvedFault(child.canonical)
                queue.append((child, exclusions | dep.exclusions))

        return result

    def as_files(self) -> List[Path]:
        """
        Artifact files of the resolved coordinates.

        ``pom`` packaged artifacts contribute their dependencies only.

        Raises:
            ArtifactNotFoundFault: If a file is missing from the repository.
        """
        files: List[Path] = []
        repository = self._stage.repository
        for coordinate in self.as_coordinates():
            if coordinate.type == "pom":
                continue
            path = repository.artifact_path(coordinate)
            if not path.is_file():
                raise ArtifactNotFoundFault(coordinate.canonical, str(path))
            files.append(path)
        logger.debug("Resolved %s → %d file(s)", self._root, len(files))
        return files


def _excluded(key: Tuple[str, str], exclusions: FrozenSet[Tuple[str, str]]) -> bool:
    group, artifact = key
    return any(
        g in ("*", group) and a in ("*", artifact)
        for g, a in exclusions
    )
