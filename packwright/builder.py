"""
Archive Builders — fluent, shape-aware assembly of archives.

Usage::

    jar = (
        library("app.jar")
        .append_classes(App, Settings)
        .append_packages_recursively("app.handlers")
        .append_resource("config/app.properties")
        .append_manifest_resource("config/beans.xml", "beans.xml")
        .build()
    )

    war = (
        web_deployable("app.war")
        .append_classes(App)
        .append_web_resource("web/web.xml", "web.xml")
        .append_libraries(jar)
        .build()
    )

    ear = enterprise("app.ear").append_module(war).build()

Every ``append_*`` method returns the builder typed as its concrete
class, so shape-specific methods stay available after shared ones.
How libraries are merged depends on the shape:

- library archives merge each library's entries in order, then make
  sure a manifest exists;
- web and enterprise archives add the libraries in one batch under
  their libraries directory.

``build()`` hands the archive over; the builder cannot be used
afterwards.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, Optional, Sequence, Type, TypeVar, Union

from .archives import (
    Archive,
    EnterpriseArchive,
    LibraryArchive,
    WebArchive,
    create_archive,
)
from .archives.shapes import ResourceLike
from .config import PackwrightConfig, load_config
from .faults import BuilderClosedFault
from .resolver import DependencyResolver

logger = logging.getLogger("packwright.builder")

A = TypeVar("A", bound=Archive)
B = TypeVar("B", bound="ArchiveBuilder")


# ── Library merge policies ──────────────────────────────────────────────


class LibraryMergePolicy(ABC):
    """How a shape folds library archives into the archive being built."""

    @abstractmethod
    def merge(self, archive: A, libraries: Sequence[Archive]) -> A:
        ...


class SequentialMergePolicy(LibraryMergePolicy):
    """Merge libraries one by one in argument order, then ensure a manifest."""

    def __init__(self, created_by: str = "packwright") -> None:
        self.created_by = created_by

    def merge(self, archive: A, libraries: Sequence[Archive]) -> A:
        if not libraries:
            return archive
        result = archive
        for library in libraries:
            result = result.merge(library)
        return result.add_manifest(self.created_by)


class BatchLibraryPolicy(LibraryMergePolicy):
    """Add all libraries at once under the shape's libraries directory."""

    def merge(self, archive: A, libraries: Sequence[Archive]) -> A:
        return archive.add_as_libraries(*libraries)


# ── Base builder ────────────────────────────────────────────────────────


class ArchiveBuilder(ABC, Generic[A]):
    """
    Owns one archive under construction.

    Subclasses set :attr:`archive_type`, choose a merge policy and
    implement :meth:`build`.
    """

    archive_type: Type[Archive] = Archive

    def __init__(self, archive_name: str, *, config: Optional[PackwrightConfig] = None) -> None:
        self.config = config if config is not None else load_config()
        self._archive: Optional[A] = create_archive(self.archive_type, archive_name)
        self.merge_policy = self._create_merge_policy()

    @property
    def archive(self) -> A:
        """The archive under construction."""
        if self._archive is None:
            raise BuilderClosedFault(type(self).__name__)
        return self._archive

    @archive.setter
    def archive(self, value: A) -> None:
        self._archive = value

    @property
    def closed(self) -> bool:
        return self._archive is None

    # ── Libraries ────────────────────────────────────────────────────

    def append_libraries(self: B, *libraries: Archive) -> B:
        """Fold *libraries* into the archive using the shape's merge policy."""
        self.archive = self._append_libraries_to_archive(libraries)
        logger.debug("%s: appended %d libraries", self.archive.name, len(libraries))
        return self._self()

    def resolve_maven_dependencies(
        self: B,
        pom_file: Union[str, Path],
        **options: Any,
    ) -> DependencyResolver[B]:
        """
        Open a resolver bound to this builder.

        The descriptor is not read until the first resolve call.
        *options* are passed to :class:`DependencyResolver`.
        """
        if self.closed:
            raise BuilderClosedFault(type(self).__name__)
        return DependencyResolver(self, pom_file, **options)

    # ── Build ────────────────────────────────────────────────────────

    @abstractmethod
    def build(self) -> A:
        """Hand over the finished archive and close the builder."""
        ...

    # ── Internals ────────────────────────────────────────────────────

    def _self(self: B) -> B:
        return self

    def _append_libraries_to_archive(self, libraries: Sequence[Archive]) -> A:
        return self.merge_policy.merge(self.archive, libraries)

    @abstractmethod
    def _create_merge_policy(self) -> LibraryMergePolicy:
        ...

    def _hand_over(self, shape: Type[A]) -> A:
        """Narrow the archive to *shape* and close the builder."""
        result = self.archive.as_(shape)
        self._archive = None
        logger.debug("Built %r", result)
        return result

    def __repr__(self) -> str:
        state = "closed" if self.closed else repr(self._archive)
        return f"<{type(self).__name__} {state}>"


class ClassContainingArchiveBuilder(ArchiveBuilder[A]):
    """Builder for shapes that carry classes, packages and resources."""

    def append_classes(self: B, *classes: type) -> B:
        self.archive = self.archive.add_classes(*classes)
        return self._self()

    def append_packages_recursively(self: B, *packages: str) -> B:
        self.archive = self.archive.add_packages(True, *packages)
        return self._self()

    def append_packages_non_recursively(self: B, *packages: str) -> B:
        self.archive = self.archive.add_packages(False, *packages)
        return self._self()

    def append_resource(
        self: B,
        resource: ResourceLike,
        target: Optional[Union[str, Path]] = None,
    ) -> B:
        """Add a resource; *target* defaults to the resource path."""
        self.archive = self.archive.add_as_resource(resource, target)
        return self._self()

    def append_manifest_resource(
        self: B,
        resource: ResourceLike,
        target: Union[str, Path],
    ) -> B:
        self.archive = self.archive.add_as_manifest_resource(resource, target)
        return self._self()


# ── Shape builders ──────────────────────────────────────────────────────


class LibraryArchiveBuilder(ClassContainingArchiveBuilder[LibraryArchive]):
    archive_type = LibraryArchive

    def _create_merge_policy(self) -> LibraryMergePolicy:
        return SequentialMergePolicy(self.config.manifest_created_by)

    def build(self) -> LibraryArchive:
        return self._hand_over(LibraryArchive)


class WebArchiveBuilder(ClassContainingArchiveBuilder[WebArchive]):
    archive_type = WebArchive

    def append_web_resource(
        self,
        resource: ResourceLike,
        target: Union[str, Path],
    ) -> "WebArchiveBuilder":
        """Add a resource under ``WEB-INF/``."""
        self.archive = self.archive.add_as_web_inf_resource(resource, target)
        return self._self()

    def _create_merge_policy(self) -> LibraryMergePolicy:
        return BatchLibraryPolicy()

    def build(self) -> WebArchive:
        return self._hand_over(WebArchive)


class EnterpriseArchiveBuilder(ArchiveBuilder[EnterpriseArchive]):
    archive_type = EnterpriseArchive

    def append_module(self, module: Archive) -> "EnterpriseArchiveBuilder":
        """Deploy *module* inside the enterprise archive."""
        self.archive = self.archive.add_as_module(module)
        return self._self()

    def _create_merge_policy(self) -> LibraryMergePolicy:
        return BatchLibraryPolicy()

    def build(self) -> EnterpriseArchive:
        return self._hand_over(EnterpriseArchive)


# ── Factories ───────────────────────────────────────────────────────────


def library(archive_name: str, *, config: Optional[PackwrightConfig] = None) -> LibraryArchiveBuilder:
    """Start a library archive."""
    return LibraryArchiveBuilder(archive_name, config=config)


def web_deployable(archive_name: str, *, config: Optional[PackwrightConfig] = None) -> WebArchiveBuilder:
    """Start a web-deployable archive."""
    return WebArchiveBuilder(archive_name, config=config)


def enterprise(archive_name: str, *, config: Optional[PackwrightConfig] = None) -> EnterpriseArchiveBuilder:
    """Start an enterprise archive."""
    return EnterpriseArchiveBuilder(archive_name, config=config)
