"""
Packwright faults - structured fault signals.

Every error raised by packwright is a :class:`Fault`: an exception carrying
a stable code, a domain, a severity and metadata.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels

Domain faults live in :mod:`packwright.faults.domains`.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DEFAULT_SEVERITY,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    ArchiveConfigFault,
    ArchiveFault,
    ArchiveShapeFault,
    ResourceNotFoundFault,
    ArchiveImportFault,
    BuilderClosedFault,
    ResolutionFault,
    DescriptorFault,
    CoordinateFault,
    ScopeFault,
    VersionNotResolvedFault,
    ArtifactNotFoundFault,
    DependencyResolutionFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DEFAULT_SEVERITY",
    # Config
    "ConfigFault",
    "ConfigInvalidFault",
    "ArchiveConfigFault",
    # Archive
    "ArchiveFault",
    "ArchiveShapeFault",
    "ResourceNotFoundFault",
    "ArchiveImportFault",
    "BuilderClosedFault",
    # Resolution
    "ResolutionFault",
    "DescriptorFault",
    "CoordinateFault",
    "ScopeFault",
    "VersionNotResolvedFault",
    "ArtifactNotFoundFault",
    "DependencyResolutionFault",
]
