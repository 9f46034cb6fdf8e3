"""
Packwright — fluent assembly of deployable archives.

Builds library, web-deployable and enterprise archives from Python
classes, packages, resources and dependencies resolved from a Maven
project descriptor.

Quick start::

    from packwright import library, enterprise

    lib = (
        library("app.lib")
        .append_classes(App, Settings)
        .resolve_maven_dependencies("pom.xml")
            .with_scopes("compile", "runtime")
            .resolve_dependency("org.acme", "core")
            .apply()
        .build()
    )

    ear = enterprise("app.ear").append_module(lib).build()
    ear.export("dist/")
"""

__version__ = "0.1.0"
__cli_name__ = "packwright"

from .archives import (
    Archive,
    ArchiveShape,
    EnterpriseArchive,
    GenericArchive,
    LibraryArchive,
    WebArchive,
    create_archive,
    import_archive,
)
from .builder import (
    ArchiveBuilder,
    ClassContainingArchiveBuilder,
    EnterpriseArchiveBuilder,
    LibraryArchiveBuilder,
    WebArchiveBuilder,
    enterprise,
    library,
    web_deployable,
)
from .config import ConfigLoader, PackwrightConfig, load_config
from .faults import Fault, FaultDomain, Severity
from .resolver import DependencyCoordinate, DependencyResolver, ScopeType

__all__ = [
    # Factories
    "library",
    "web_deployable",
    "enterprise",
    # Builders
    "ArchiveBuilder",
    "ClassContainingArchiveBuilder",
    "LibraryArchiveBuilder",
    "WebArchiveBuilder",
    "EnterpriseArchiveBuilder",
    # Archives
    "Archive",
    "ArchiveShape",
    "GenericArchive",
    "LibraryArchive",
    "WebArchive",
    "EnterpriseArchive",
    "create_archive",
    "import_archive",
    # Resolution
    "DependencyCoordinate",
    "DependencyResolver",
    "ScopeType",
    # Config
    "ConfigLoader",
    "PackwrightConfig",
    "load_config",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
]
