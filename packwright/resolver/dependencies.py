"""
Dependency Resolver — resolve coordinates and merge them into a builder.

A resolver is obtained from a builder and bound to it::

    jar = (
        library("app.jar")
        .append_classes(App)
        .resolve_maven_dependencies("pom.xml")
            .with_profile("prod")
            .with_scopes(ScopeType.COMPILE, ScopeType.RUNTIME)
            .resolve_dependency("org.acme", "core")
            .apply()
        .build()
    )

Resolution is fail-soft: a resolve call that fails for any reason
contributes nothing, is logged, and is recorded in :attr:`failures`.
Pass ``strict=True`` (or set ``strict_resolution``) to raise instead.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Generic, List, Optional, Set, Tuple, TypeVar, Union

from ..archives import Archive, import_archive
from ..faults import DependencyResolutionFault
from .coordinates import DependencyCoordinate, ScopeType
from .stage import LocalRepository, ResolveStage, load_descriptor

if TYPE_CHECKING:
    from ..builder import ArchiveBuilder

logger = logging.getLogger("packwright.resolver.dependencies")

B = TypeVar("B", bound="ArchiveBuilder")

DescriptorLoader = Callable[[Path, List[str]], ResolveStage]
ArchiveImporter = Callable[[Path], Archive]


class DependencyResolver(Generic[B]):
    """
    Resolves dependencies declared by a project descriptor for one builder.

    Profiles and scopes accumulate by set union until the descriptor is
    loaded, which happens once, on the first :meth:`resolve_dependency`.
    """

    __slots__ = (
        "_builder",
        "_descriptor_path",
        "_loader",
        "_importer",
        "_strict",
        "_stage",
        "_profiles",
        "_scopes",
        "_resolved",
        "failures",
    )

    def __init__(
        self,
        builder: B,
        descriptor_path: Union[str, Path],
        *,
        repository: Union[str, Path, LocalRepository, None] = None,
        strict: Optional[bool] = None,
        loader: Optional[DescriptorLoader] = None,
        importer: Optional[ArchiveImporter] = None,
    ) -> None:
        config = builder.config
        if loader is None:
            if not isinstance(repository, LocalRepository):
                repository = LocalRepository(repository or config.local_repository)
            loader = partial(load_descriptor, repository=repository)

        self._builder = builder
        self._descriptor_path = Path(descriptor_path)
        self._loader = loader
        self._importer = importer or import_archive
        self._strict = config.strict_resolution if strict is None else strict
        self._stage: Optional[ResolveStage] = None
        self._profiles: Set[str] = set()
        self._scopes: Set[ScopeType] = set()
        # (name, digest) → archive; insertion ordered
        self._resolved: Dict[Tuple[str, str], Archive] = {}
        self.failures: List[DependencyResolutionFault] = []

    # ── Filters ──────────────────────────────────────────────────────

    def with_profile(self, profile: str) -> "DependencyResolver[B]":
        """Activate a descriptor profile."""
        self._profiles.add(profile)
        self._warn_if_loaded("profile")
        return self

    def with_scopes(self, *scopes: Union[ScopeType, str]) -> "DependencyResolver[B]":
        """Restrict resolution to dependencies declared in *scopes*."""
        self._scopes.update(ScopeType.coerce(s) for s in scopes)
        self._warn_if_loaded("scopes")
        return self

    @property
    def profiles(self) -> frozenset:
        return frozenset(self._profiles)

    @property
    def scopes(self) -> frozenset:
        return frozenset(self._scopes)

    # ── Resolution ───────────────────────────────────────────────────

    def resolve_dependency(
        self,
        group: str,
        artifact: str,
        packaging: Optional[str] = None,
        classifier: Optional[str] = None,
        version: Optional[str] = None,
    ) -> "DependencyResolver[B]":
        """
        Resolve ``group:artifact`` and its transitive closure.

        The version comes from the descriptor unless *version* is given.
        """
        coordinate = DependencyCoordinate(
            group,
            artifact,
            packaging=packaging or "",
            classifier=classifier or "",
            version=version or "",
        )
        for archive in self._resolve(coordinate.canonical):
            self._resolved.setdefault((archive.name, archive.digest), archive)
        return self

    @property
    def resolved(self) -> List[Archive]:
        """Archives resolved so far, de-duplicated by name and content."""
        return list(self._resolved.values())

    def apply(self) -> B:
        """Append the resolved archives to the builder and return it."""
        logger.debug(
            "Applying %d resolved archive(s) to %s", len(self._resolved), type(self._builder).__name__,
        )
        return self._builder.append_libraries(*self._resolved.values())

    # ── Internals ────────────────────────────────────────────────────

    def _resolve(self, coordinate: str) -> List[Archive]:
        try:
            files = self._load_stage().resolve(coordinate).with_transitivity().as_files()
            return [self._importer(path) for path in files]
        except Exception as exc:
            fault = DependencyResolutionFault(coordinate, exc)
            if self._strict:
                raise fault from exc
            fault.log(logger, "continuing without it")
            self.failures.append(fault)
            return []

    def _load_stage(self) -> ResolveStage:
        if self._stage is None:
            stage = self._loader(self._descriptor_path, sorted(self._profiles))
            if self._scopes:
                stage = stage.with_scopes(*sorted(self._scopes, key=lambda s: s.value))
            self._stage = stage
        return self._stage

    def _warn_if_loaded(self, what: str) -> None:
        if self._stage is not None:
            logger.debug("%s changed after %s was loaded; filter not applied", what, self._descriptor_path)

    def __repr__(self) -> str:
        return (
            f"<DependencyResolver {self._descriptor_path} profiles={sorted(self._profiles)} "
            f"scopes={sorted(s.value for s in self._scopes)} resolved={len(self._resolved)}>"
        )
