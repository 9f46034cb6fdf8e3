"""
Archive Core — the foundational container types.

An archive is a named, insertion-ordered mapping of entry paths to assets.
Paths are normalised to ``/``-separated, relative form
(``META-INF/MANIFEST.MF``). Writing an asset at an existing path replaces
it: the last write at a given path wins.

Every mutator returns the archive so call chains can rebind::

    archive = archive.add(BytesAsset(b"x=1"), "app.properties").merge(other)
"""

from __future__ import annotations

import hashlib
import io
import logging
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Type, TypeVar, Union

from ..faults import ArchiveConfigFault, ArchiveShapeFault

logger = logging.getLogger("packwright.archives")

# Registry: shape → Archive subclass.
# Populated by ``register_archive_shape()`` in shapes.py.
_SHAPE_REGISTRY: Dict["ArchiveShape", Type["Archive"]] = {}

# Fixed timestamp so exported bytes depend on content only.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

A = TypeVar("A", bound="Archive")


# ── Enums ───────────────────────────────────────────────────────────────


class ArchiveShape(str, Enum):
    """Archive shapes recognised by the container."""

    GENERIC = "generic"
    LIBRARY = "library"
    WEB_DEPLOYABLE = "web"
    ENTERPRISE = "enterprise"


# ── Assets ──────────────────────────────────────────────────────────────


class Asset:
    """Content stored at an archive path."""

    def read(self) -> bytes:
        raise NotImplementedError


@dataclass(frozen=True)
class BytesAsset(Asset):
    data: bytes

    def read(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class FileAsset(Asset):
    """Content read lazily from a file on disk."""

    path: Path

    def read(self) -> bytes:
        return Path(self.path).read_bytes()


class ArchiveAsset(Asset):
    """A nested archive, written as a zip when the parent is exported."""

    __slots__ = ("archive",)

    def __init__(self, archive: "Archive") -> None:
        self.archive = archive

    def read(self) -> bytes:
        return self.archive.to_bytes()

    def __repr__(self) -> str:
        return f"ArchiveAsset({self.archive.name!r})"


AssetLike = Union[Asset, bytes, str]


def as_asset(content: AssetLike) -> Asset:
    """Coerce raw bytes or text to an :class:`Asset`."""
    if isinstance(content, Asset):
        return content
    if isinstance(content, str):
        return BytesAsset(content.encode("utf-8"))
    if isinstance(content, (bytes, bytearray)):
        return BytesAsset(bytes(content))
    raise TypeError(f"Cannot store {type(content).__name__} in an archive")


def normalize_path(path: Union[str, Path]) -> str:
    """
    Normalise an entry path.

    Raises:
        ValueError: If the path is empty or escapes the archive root.
    """
    parts = [p for p in str(path).replace("\\", "/").split("/") if p and p != "."]
    if not parts:
        raise ValueError(f"Invalid archive path: {path!r}")
    if ".." in parts:
        raise ValueError(f"Archive path must not contain '..': {path!r}")
    return "/".join(parts)


def join_path(root: str, path: Union[str, Path]) -> str:
    return normalize_path(f"{root}/{path}") if root else normalize_path(path)


# ── Archive ─────────────────────────────────────────────────────────────


class Archive:
    """
    Named container of path-addressed entries.

    Subclasses set :attr:`shape` and mix in container capabilities
    (classes, manifest, libraries, modules).
    """

    shape: ArchiveShape = ArchiveShape.GENERIC
    extension: str = ""

    def __init__(self, name: str) -> None:
        self._name = name
        self._entries: Dict[str, Asset] = {}

    # ── Identity ─────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def digest(self) -> str:
        """Content digest ``sha256:…`` over sorted paths and contents."""
        h = hashlib.sha256()
        for path in sorted(self._entries):
            h.update(path.encode("utf-8"))
            h.update(b"\0")
            h.update(hashlib.sha256(self._entries[path].read()).digest())
        return f"sha256:{h.hexdigest()}"

    # ── Entries ──────────────────────────────────────────────────────

    def add(self: A, content: AssetLike, path: Union[str, Path]) -> A:
        """Store *content* at *path*, replacing any existing entry."""
        target = normalize_path(path)
        self._entries[target] = as_asset(content)
        logger.debug("%s: added %s", self._name, target)
        return self

    def delete(self: A, path: Union[str, Path]) -> A:
        self._entries.pop(normalize_path(path), None)
        return self

    def merge(self: A, other: "Archive") -> A:
        """Copy every entry of *other* into this archive, in order."""
        for path, asset in other._entries.items():
            self._entries[path] = asset
        logger.debug("%s: merged %d entries from %s", self._name, len(other), other.name)
        return self

    def get(self, path: Union[str, Path]) -> Optional[Asset]:
        return self._entries.get(normalize_path(path))

    def read(self, path: Union[str, Path]) -> bytes:
        """Read the bytes at *path* (``KeyError`` when absent)."""
        return self._entries[normalize_path(path)].read()

    def contains(self, path: Union[str, Path]) -> bool:
        return normalize_path(path) in self._entries

    def paths(self) -> List[str]:
        return list(self._entries)

    def _entries_under(self, root: str) -> Iterator[tuple[str, Asset]]:
        prefix = root.rstrip("/") + "/"
        for path, asset in self._entries.items():
            if path.startswith(prefix):
                yield path, asset

    # ── Narrowing ────────────────────────────────────────────────────

    def as_(self, target: Union[Type[A], ArchiveShape, str]) -> A:
        """
        View this archive as another shape.

        A :class:`GenericArchive` can become any shape and any shape can
        become a :class:`GenericArchive`. Narrowing to the archive's own
        type returns the archive itself.

        Raises:
            ArchiveShapeFault: For any other combination.
        """
        target_cls = shape_class(target)
        if isinstance(self, target_cls):
            return self
        if self.shape is not ArchiveShape.GENERIC and target_cls.shape is not ArchiveShape.GENERIC:
            raise ArchiveShapeFault(self._name, self.shape.value, target_cls.shape.value)
        view = target_cls(self._name)
        view._entries = dict(self._entries)
        return view

    # ── Serialisation ────────────────────────────────────────────────

    def to_bytes(self) -> bytes:
        """Serialise as a zip file."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for path, asset in self._entries.items():
                info = zipfile.ZipInfo(path, date_time=_ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                zf.writestr(info, asset.read())
        return buffer.getvalue()

    def export(self, destination: Union[str, Path]) -> Path:
        """
        Write the archive as a zip.

        If *destination* is an existing directory the archive name is used
        as the file name.
        """
        path = Path(destination)
        if path.is_dir():
            path = path / self._name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        logger.info("Exported archive: %s → %s", self._name, path)
        return path

    # ── Dunder ───────────────────────────────────────────────────────

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and self.contains(path)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name} entries={len(self._entries)}>"


class GenericArchive(Archive):
    """Shape-less archive; the result of importing an arbitrary file."""

    shape = ArchiveShape.GENERIC


# ── Shape Registration ──────────────────────────────────────────────────


def register_archive_shape(shape: ArchiveShape, cls: Type[Archive]) -> None:
    """Register the class that implements *shape*."""
    _SHAPE_REGISTRY[shape] = cls


register_archive_shape(ArchiveShape.GENERIC, GenericArchive)


def shape_class(shape: Union[Type[A], ArchiveShape, str]) -> Type[A]:
    """
    Resolve a shape, shape value or Archive subclass to its class.

    Raises:
        ArchiveConfigFault: If the shape is unknown.
    """
    if isinstance(shape, type) and issubclass(shape, Archive):
        return shape
    try:
        key = ArchiveShape(shape)
    except ValueError:
        raise ArchiveConfigFault(f"Unknown archive shape: {shape!r}", shape=shape) from None
    cls = _SHAPE_REGISTRY.get(key)
    if cls is None:
        raise ArchiveConfigFault(f"No archive class registered for shape {key.value}", shape=key)
    return cls


def create_archive(shape: Union[Type[A], ArchiveShape, str], name: str) -> A:
    """
    Create an empty archive of *shape* named *name*.

    Raises:
        ArchiveConfigFault: Unknown shape, or a name that is empty or
            contains a path separator.
    """
    cls = shape_class(shape)
    if not isinstance(name, str) or not name.strip():
        raise ArchiveConfigFault("Archive name must not be empty", shape=cls.shape, name=name)
    if "/" in name or "\\" in name:
        raise ArchiveConfigFault(
            f"Archive name must not contain a path separator: {name!r}",
            shape=cls.shape,
            name=name,
        )
    return cls(name)
