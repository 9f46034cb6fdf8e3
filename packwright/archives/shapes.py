"""
Archive Shapes — concrete archive types and their container capabilities.

Capabilities are mixins over :class:`Archive`:

- :class:`ManifestContainer`  — ``META-INF/`` resources and the manifest
- :class:`ClassContainer`     — Python classes, packages and resources
- :class:`LibraryContainer`   — nested library archives under a reserved root
- :class:`ModuleContainer`    — deployable modules (enterprise archives)

Layout per shape::

    LibraryArchive      classes + resources at the root
    WebArchive          classes + resources under WEB-INF/classes/,
                        libraries under WEB-INF/lib/
    EnterpriseArchive   modules at the root, libraries under lib/
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, TypeVar, Union

from ..faults import ResourceNotFoundFault
from .core import (
    Archive,
    ArchiveAsset,
    ArchiveShape,
    Asset,
    BytesAsset,
    FileAsset,
    join_path,
    register_archive_shape,
)

logger = logging.getLogger("packwright.archives.shapes")

MANIFEST_PATH = "META-INF/MANIFEST.MF"

ResourceLike = Union[str, Path, Asset]

C = TypeVar("C", bound=Archive)


# ── Resource lookup ─────────────────────────────────────────────────────


def locate_resource(resource: ResourceLike) -> Asset:
    """
    Resolve *resource* to an asset.

    Strings and paths are looked up on the filesystem first, then relative
    to each ``sys.path`` entry.

    Raises:
        ResourceNotFoundFault: If no file matches.
    """
    if isinstance(resource, Asset):
        return resource
    candidate = Path(resource)
    if candidate.is_file():
        return FileAsset(candidate)
    if not candidate.is_absolute():
        for entry in sys.path:
            located = Path(entry or ".") / candidate
            if located.is_file():
                return FileAsset(located)
    raise ResourceNotFoundFault(str(resource))


def default_target(resource: ResourceLike) -> str:
    """Target path for a resource added without one."""
    if isinstance(resource, Asset):
        raise ValueError("A target path is required for in-memory assets")
    path = Path(resource)
    return path.name if path.is_absolute() else str(resource)


def manifest_text(created_by: str = "packwright") -> str:
    return f"Manifest-Version: 1.0\nCreated-By: {created_by}\n"


# ── Capabilities ────────────────────────────────────────────────────────


class ManifestContainer:
    """Archives with a ``META-INF/`` directory."""

    manifest_root = "META-INF"

    def add_as_manifest_resource(self: C, resource: ResourceLike, target: Union[str, Path]) -> C:
        return self.add(locate_resource(resource), join_path(self.manifest_root, target))

    def add_manifest(self: C, created_by: str = "packwright") -> C:
        """Add a default ``MANIFEST.MF`` unless one is already present."""
        if not self.contains(MANIFEST_PATH):
            self.add(BytesAsset(manifest_text(created_by).encode("utf-8")), MANIFEST_PATH)
        return self

    @property
    def has_manifest(self) -> bool:
        return self.contains(MANIFEST_PATH)


class ClassContainer(ManifestContainer):
    """
    Archives that carry Python code.

    A class is stored as the source file of its defining module, at the
    module's dotted path under :attr:`classes_root`.
    """

    classes_root = ""
    resources_root = ""

    def add_classes(self: C, *classes: type) -> C:
        for cls in classes:
            source, target = _class_source(cls)
            self.add(FileAsset(source), join_path(self.classes_root, target))
        return self

    def add_packages(self: C, recursive: bool, *packages: str) -> C:
        """
        Add every ``.py`` file of each named package.

        Args:
            recursive: Include sub-directories (sub-packages).
            packages: Dotted package names, importable from ``sys.path``.
        """
        for package in packages:
            for source, target in _package_sources(package, recursive):
                self.add(FileAsset(source), join_path(self.classes_root, target))
        return self

    def add_as_resource(
        self: C,
        resource: ResourceLike,
        target: Optional[Union[str, Path]] = None,
    ) -> C:
        if target is None:
            target = default_target(resource)
        return self.add(locate_resource(resource), join_path(self.resources_root, target))


class LibraryContainer:
    """Archives that bundle other archives as libraries."""

    libraries_root = "lib"

    def add_as_libraries(self: C, *archives: Archive) -> C:
        for library in archives:
            self.add(ArchiveAsset(library), join_path(self.libraries_root, library.name))
        return self

    @property
    def library_names(self) -> List[str]:
        return [path.rsplit("/", 1)[-1] for path, _ in self._entries_under(self.libraries_root)]

    @property
    def libraries(self) -> List[Archive]:
        return [
            asset.archive
            for _, asset in self._entries_under(self.libraries_root)
            if isinstance(asset, ArchiveAsset)
        ]


class ModuleContainer:
    """Archives that deploy other archives as modules."""

    def add_as_module(self: C, module: Archive) -> C:
        path = join_path("", module.name)
        self.add(ArchiveAsset(module), path)
        self._modules[path] = module
        return self

    @property
    def modules(self) -> List[Archive]:
        """Modules still present at their recorded path."""
        present = []
        for path, module in self._modules.items():
            asset = self.get(path)
            if isinstance(asset, ArchiveAsset) and asset.archive is module:
                present.append(module)
        return present


# ── Shapes ──────────────────────────────────────────────────────────────


class LibraryArchive(ClassContainer, Archive):
    """Library (jar-style) archive: classes and resources at the root."""

    shape = ArchiveShape.LIBRARY
    extension = ".jar"


class WebArchive(ClassContainer, LibraryContainer, Archive):
    """Web-deployable archive."""

    shape = ArchiveShape.WEB_DEPLOYABLE
    extension = ".war"

    classes_root = "WEB-INF/classes"
    resources_root = "WEB-INF/classes"
    libraries_root = "WEB-INF/lib"
    web_inf_root = "WEB-INF"

    def add_as_web_inf_resource(self, resource: ResourceLike, target: Union[str, Path]) -> "WebArchive":
        return self.add(locate_resource(resource), join_path(self.web_inf_root, target))


class EnterpriseArchive(ManifestContainer, LibraryContainer, ModuleContainer, Archive):
    """Enterprise archive: a container of modules and shared libraries."""

    shape = ArchiveShape.ENTERPRISE
    extension = ".ear"

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._modules: dict = {}


register_archive_shape(ArchiveShape.LIBRARY, LibraryArchive)
register_archive_shape(ArchiveShape.WEB_DEPLOYABLE, WebArchive)
register_archive_shape(ArchiveShape.ENTERPRISE, EnterpriseArchive)


# ── Source discovery ────────────────────────────────────────────────────


def _module_path(module_name: str, filename: str) -> str:
    base = module_name.replace(".", "/")
    if os.path.basename(filename) == "__init__.py":
        return f"{base}/__init__.py"
    return f"{base}.py"


def _class_source(cls: type) -> tuple[Path, str]:
    """Source file of *cls* and its archive path."""
    label = getattr(cls, "__qualname__", repr(cls))
    module_name = getattr(cls, "__module__", None)
    if not module_name or module_name == "__main__":
        raise ResourceNotFoundFault(label, "has no importable module")
    try:
        filename = inspect.getsourcefile(cls)
    except (TypeError, OSError):
        filename = None
    if not filename or not os.path.isfile(filename):
        raise ResourceNotFoundFault(label, "has no source file")
    return Path(filename), _module_path(module_name, filename)


def _package_sources(package: str, recursive: bool):
    """Yield ``(source, archive_path)`` for the ``.py`` files of *package*."""
    try:
        spec = importlib.util.find_spec(package)
    except (ImportError, ValueError):
        spec = None
    if spec is None:
        raise ResourceNotFoundFault(package, "is not an importable package")
    if spec.submodule_search_locations is None:
        raise ResourceNotFoundFault(package, "is a module, not a package")

    base = package.replace(".", "/")
    for location in spec.submodule_search_locations:
        root = Path(location)
        if recursive:
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames[:] = sorted(
                    d for d in dirnames if d != "__pycache__" and not d.startswith(".")
                )
                for filename in sorted(filenames):
                    if filename.endswith(".py"):
                        source = Path(dirpath) / filename
                        yield source, f"{base}/{source.relative_to(root).as_posix()}"
        else:
            for source in sorted(root.glob("*.py")):
                yield source, f"{base}/{source.name}"
