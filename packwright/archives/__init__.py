"""
Packwright Archives — in-memory archive container.

- **Shapes** — ``LibraryArchive``, ``WebArchive``, ``EnterpriseArchive``
  and the shape-less ``GenericArchive``
- **Assets** — bytes, files and nested archives stored at normalised paths
- **Merge / narrow** — ``merge`` copies entries (last write wins),
  ``as_`` views an archive as another shape
- **Zip I/O** — ``import_archive`` and ``Archive.export``

Quick start::

    from packwright.archives import ArchiveShape, create_archive, import_archive

    jar = create_archive(ArchiveShape.LIBRARY, "app.jar")
    jar.add_as_resource("config/app.properties", "app.properties")
    jar.merge(import_archive("vendor/lib.jar")).add_manifest()
    jar.export("dist/")
"""

from .core import (
    Archive,
    ArchiveAsset,
    ArchiveShape,
    Asset,
    BytesAsset,
    FileAsset,
    GenericArchive,
    create_archive,
    normalize_path,
    register_archive_shape,
    shape_class,
)
from .shapes import (
    MANIFEST_PATH,
    ClassContainer,
    EnterpriseArchive,
    LibraryArchive,
    LibraryContainer,
    ManifestContainer,
    ModuleContainer,
    WebArchive,
    locate_resource,
)
from .importer import import_archive

__all__ = [
    # Core
    "Archive",
    "ArchiveShape",
    "GenericArchive",
    "create_archive",
    "normalize_path",
    "register_archive_shape",
    "shape_class",
    # Assets
    "Asset",
    "BytesAsset",
    "FileAsset",
    "ArchiveAsset",
    # Shapes
    "LibraryArchive",
    "WebArchive",
    "EnterpriseArchive",
    "ClassContainer",
    "ManifestContainer",
    "LibraryContainer",
    "ModuleContainer",
    "MANIFEST_PATH",
    "locate_resource",
    # I/O
    "import_archive",
]
