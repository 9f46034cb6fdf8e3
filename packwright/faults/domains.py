"""
Packwright faults - concrete faults per domain.

CONFIG and ARCHIVE faults propagate to the caller. RESOLUTION faults are
absorbed per resolve call by :class:`~packwright.resolver.DependencyResolver`
unless it runs in strict mode.
"""

from typing import Any, Iterable, Optional

from .core import Fault, FaultDomain


# ============================================================================
# CONFIG
# ============================================================================

class ConfigFault(Fault):
    domain = FaultDomain.CONFIG


class ConfigInvalidFault(ConfigFault):
    """A setting holds an unusable value."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            "CONFIG_INVALID",
            f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason},
        )


class ArchiveConfigFault(ConfigFault):
    """Unknown archive shape or unusable archive name."""

    def __init__(self, reason: str, *, shape: Any = None, name: Optional[str] = None):
        super().__init__(
            "ARCHIVE_CONFIG_INVALID",
            reason,
            metadata={"shape": None if shape is None else str(shape), "name": name},
        )


# ============================================================================
# ARCHIVE
# ============================================================================

class ArchiveFault(Fault):
    domain = FaultDomain.ARCHIVE


class ArchiveShapeFault(ArchiveFault):
    """An archive was narrowed to a shape it cannot take."""

    def __init__(self, archive_name: str, source: str, target: str):
        super().__init__(
            "ARCHIVE_SHAPE_MISMATCH",
            f"Archive '{archive_name}' of shape {source} cannot be viewed as {target}",
            metadata={"archive": archive_name, "source": source, "target": target},
        )


class ResourceNotFoundFault(ArchiveFault):
    """A resource file, class source or package could not be located."""

    def __init__(self, resource: str, reason: str = "not found"):
        super().__init__(
            "RESOURCE_NOT_FOUND",
            f"Resource '{resource}' {reason}",
            metadata={"resource": resource},
        )


class ArchiveImportFault(ArchiveFault):
    def __init__(self, path: str, reason: str):
        super().__init__(
            "ARCHIVE_IMPORT_FAILED",
            f"Cannot import '{path}' as an archive: {reason}",
            metadata={"path": path, "reason": reason},
        )


class BuilderClosedFault(ArchiveFault):
    """A builder was used after ``build()`` handed its archive over."""

    def __init__(self, builder: str):
        super().__init__(
            "BUILDER_CLOSED",
            f"{builder} has already built its archive",
            metadata={"builder": builder},
        )


# ============================================================================
# RESOLUTION
# ============================================================================

class ResolutionFault(Fault):
    domain = FaultDomain.RESOLUTION


class DescriptorFault(ResolutionFault):
    """Project descriptor is missing or malformed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            "DESCRIPTOR_INVALID",
            f"Project descriptor '{path}' cannot be loaded: {reason}",
            metadata={"path": path, "reason": reason},
        )


class CoordinateFault(ResolutionFault):
    def __init__(self, coordinate: str, reason: str):
        super().__init__(
            "COORDINATE_INVALID",
            f"Invalid coordinate '{coordinate}': {reason}",
            metadata={"coordinate": coordinate},
        )


class ScopeFault(ResolutionFault):
    def __init__(self, scope: str, known: Iterable[str]):
        known = list(known)
        super().__init__(
            "SCOPE_UNKNOWN",
            f"Unknown scope {scope!r}; expected one of {', '.join(known)}",
            metadata={"scope": scope, "known": known},
        )


class VersionNotResolvedFault(ResolutionFault):
    """Neither the coordinate nor the descriptor pins a version."""

    def __init__(self, coordinate: str):
        super().__init__(
            "VERSION_NOT_RESOLVED",
            f"No version declared for '{coordinate}'",
            metadata={"coordinate": coordinate},
        )


class ArtifactNotFoundFault(ResolutionFault):
    def __init__(self, coordinate: str, path: str):
        super().__init__(
            "ARTIFACT_NOT_FOUND",
            f"Artifact '{coordinate}' not found at {path}",
            metadata={"coordinate": coordinate, "path": path},
        )


class DependencyResolutionFault(ResolutionFault):
    """
    One ``resolve_dependency`` call failed.

    ``cause`` holds the original exception, whatever its type.
    """

    def __init__(self, coordinate: str, cause: BaseException):
        super().__init__(
            "DEPENDENCY_RESOLUTION_FAILED",
            f"Resolution of '{coordinate}' failed: {cause}",
            metadata={"coordinate": coordinate, "cause": type(cause).__name__},
        )
        self.cause = cause
