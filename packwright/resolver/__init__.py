"""
Packwright Resolver — descriptor-driven dependency resolution.

- :class:`DependencyCoordinate` / :class:`ScopeType` — what to resolve
- :class:`ProjectDescriptor` — ``pom.xml`` parsing
- :func:`load_descriptor` / :class:`ResolveStage` — version pinning and
  transitive walks over a :class:`LocalRepository`
- :class:`DependencyResolver` — builder-bound, fail-soft resolve-then-merge
"""

from .coordinates import DependencyCoordinate, ScopeType, TRANSITIVE_SCOPES
from .descriptor import (
    DeclaredDependency,
    EffectiveModel,
    Profile,
    ProjectDescriptor,
    build_effective_model,
)
from .stage import (
    LocalRepository,
    ResolveStage,
    ResolvedArtifacts,
    ResolvedFiles,
    load_descriptor,
)
from .dependencies import DependencyResolver

__all__ = [
    # Coordinates
    "DependencyCoordinate",
    "ScopeType",
    "TRANSITIVE_SCOPES",
    # Descriptor
    "DeclaredDependency",
    "EffectiveModel",
    "Profile",
    "ProjectDescriptor",
    "build_effective_model",
    # Stage
    "LocalRepository",
    "ResolveStage",
    "ResolvedFiles",
    "ResolvedArtifacts",
    "load_descriptor",
    # Resolver
    "DependencyResolver",
]
