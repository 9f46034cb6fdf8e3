"""
Archive Importer — read zip files into :class:`GenericArchive` instances.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Optional, Union

from ..faults import ArchiveImportFault
from .core import BytesAsset, GenericArchive

logger = logging.getLogger("packwright.archives.importer")


def import_archive(path: Union[str, Path], name: Optional[str] = None) -> GenericArchive:
    """
    Import the zip file at *path*.

    The archive is named after the file unless *name* is given. Directory
    entries are skipped; nested archives stay opaque byte entries.

    Raises:
        ArchiveImportFault: If the file is missing or not a zip.
    """
    source = Path(path)
    archive = GenericArchive(name or source.name)
    try:
        with zipfile.ZipFile(source) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                archive.add(BytesAsset(zf.read(info)), info.filename)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveImportFault(str(source), str(exc)) from exc
    except ValueError as exc:
        # Entry names escaping the archive root
        raise ArchiveImportFault(str(source), str(exc)) from exc
    logger.debug("Imported %s (%d entries)", source, len(archive))
    return archive
