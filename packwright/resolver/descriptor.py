"""
Project Descriptor — parsing of Maven ``pom.xml`` files.

Reads the parts of a POM that matter for dependency resolution:

- project coordinates and ``<parent>``
- ``<properties>`` (with ``${...}`` interpolation)
- ``<dependencies>`` and ``<dependencyManagement>`` (including
  ``import``-scoped BOMs)
- ``<profiles>`` with their own properties and dependencies

:func:`build_effective_model` folds parent, active profiles and imported
BOMs into one :class:`EffectiveModel`.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from ..faults import DescriptorFault, ScopeFault
from .coordinates import DependencyCoordinate, ScopeType

logger = logging.getLogger("packwright.resolver.descriptor")

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_INTERPOLATION_DEPTH = 10

ParentLookup = Callable[[DependencyCoordinate], Optional["ProjectDescriptor"]]


# ── Model ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DeclaredDependency:
    """A ``<dependency>`` element."""

    coordinate: DependencyCoordinate
    scope: Optional[ScopeType] = None
    optional: bool = False
    exclusions: FrozenSet[Tuple[str, str]] = frozenset()

    @property
    def management_key(self) -> Tuple[str, str, str, str]:
        return self.coordinate.identity

    @property
    def effective_scope(self) -> ScopeType:
        return self.scope or ScopeType.COMPILE


@dataclass
class Profile:
    id: str
    active_by_default: bool = False
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: List[DeclaredDependency] = field(default_factory=list)
    managed: List[DeclaredDependency] = field(default_factory=list)


@dataclass
class ProjectDescriptor:
    """Raw, un-interpolated contents of one POM file."""

    source: str
    group: str = ""
    artifact: str = ""
    version: str = ""
    packaging: str = "jar"
    parent: Optional[DependencyCoordinate] = None
    parent_relative_path: str = "../pom.xml"
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: List[DeclaredDependency] = field(default_factory=list)
    managed: List[DeclaredDependency] = field(default_factory=list)
    profiles: Dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def parse(cls, path: Union[str, Path]) -> "ProjectDescriptor":
        """
        Parse the POM at *path*.

        Raises:
            DescriptorFault: If the file is missing or not a POM.
        """
        source = Path(path)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise DescriptorFault(str(source), exc.strerror or str(exc)) from exc
        return cls.from_string(text, source=str(source))

    @classmethod
    def from_string(cls, text: str, *, source: str = "<string>") -> "ProjectDescriptor":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise DescriptorFault(source, f"malformed XML: {exc}") from exc
        _strip_namespaces(root)
        if root.tag != "project":
            raise DescriptorFault(source, f"root element is <{root.tag}>, expected <project>")

        descriptor = cls(source=source)
        parent = root.find("parent")
        if parent is not None:
            descriptor.parent = DependencyCoordinate(
                _text(parent, "groupId"),
                _text(parent, "artifactId"),
                packaging="pom",
                version=_text(parent, "version"),
            )
            descriptor.parent_relative_path = _text(parent, "relativePath", "../pom.xml")

        inherited_group = descriptor.parent.group if descriptor.parent else ""
        inherited_version = descriptor.parent.version if descriptor.parent else ""
        descriptor.group = _text(root, "groupId", inherited_group)
        descriptor.artifact = _text(root, "artifactId")
        descriptor.version = _text(root, "version", inherited_version)
        descriptor.packaging = _text(root, "packaging", "jar")
        descriptor.properties = _properties(root.find("properties"))
        descriptor.dependencies = _dependencies(root.find("dependencies"), source)
        descriptor.managed = _dependencies(root.find("dependencyManagement/dependencies"), source)

        for element in root.findall("profiles/profile"):
            profile = Profile(
                id=_text(element, "id"),
                active_by_default=_text(element, "activation/activeByDefault").lower() == "true",
                properties=_properties(element.find("properties")),
                dependencies=_dependencies(element.find("dependencies"), source),
                managed=_dependencies(element.find("dependencyManagement/dependencies"), source),
            )
            if profile.id:
                descriptor.profiles[profile.id] = profile

        if not descriptor.artifact:
            raise DescriptorFault(source, "missing <artifactId>")
        return descriptor

    @property
    def coordinate(self) -> DependencyCoordinate:
        return DependencyCoordinate(
            self.group or "unknown", self.artifact, packaging=self.packaging, version=self.version,
        )

    def active_profiles(self, requested: Iterable[str] = ()) -> List[Profile]:
        """
        Profiles activated by name.

        Unknown names are ignored. Profiles marked ``activeByDefault``
        apply unless a requested profile of this descriptor is activated.
        """
        requested = list(requested)
        unknown = [p for p in requested if p not in self.profiles]
        if unknown:
            logger.debug("%s: ignoring unknown profiles %s", self.source, unknown)
        activated = [self.profiles[p] for p in requested if p in self.profiles]
        if activated:
            return activated
        return [p for p in self.profiles.values() if p.active_by_default]


@dataclass
class EffectiveModel:
    """Interpolated view of a descriptor with parent, profiles and BOMs applied."""

    coordinate: DependencyCoordinate
    properties: Dict[str, str]
    dependencies: List[DeclaredDependency]
    managed: Dict[Tuple[str, str, str, str], DeclaredDependency]

    def managed_for(self, coordinate: DependencyCoordinate) -> Optional[DeclaredDependency]:
        return self.managed.get(coordinate.identity)


# ── Effective model ─────────────────────────────────────────────────────


def build_effective_model(
    descriptor: ProjectDescriptor,
    profiles: Iterable[str] = (),
    *,
    parent_lookup: Optional[ParentLookup] = None,
    bom_lookup: Optional[ParentLookup] = None,
) -> EffectiveModel:
    """
    Fold *descriptor*, its parents, active profiles and imported BOMs.

    Args:
        descriptor: The project descriptor.
        profiles: Profile names to activate in *descriptor*.
        parent_lookup: Returns the descriptor of a parent coordinate, or
            ``None`` when the parent is unavailable.
        bom_lookup: Same for ``import``-scoped managed dependencies;
            defaults to *parent_lookup*.
    """
    bom_lookup = bom_lookup or parent_lookup
    chain = _parent_chain(descriptor, parent_lookup)

    properties: Dict[str, str] = {}
    dependencies: List[DeclaredDependency] = []
    managed_raw: List[DeclaredDependency] = []
    # Eldest ancestor first so children override
    for ancestor in reversed(chain):
        properties.update(ancestor.properties)
        dependencies.extend(ancestor.dependencies)
        managed_raw.extend(ancestor.managed)
    for profile in descriptor.active_profiles(profiles):
        properties.update(profile.properties)
        dependencies.extend(profile.dependencies)
        managed_raw.extend(profile.managed)

    properties.update(_project_properties(descriptor))
    properties = {k: _interpolate(v, properties) for k, v in properties.items()}

    managed: Dict[Tuple[str, str, str, str], DeclaredDependency] = {}
    for dep in managed_raw:
        dep = _interpolate_dependency(dep, properties)
        if dep.scope is ScopeType.IMPORT and dep.coordinate.type == "pom":
            for key, imported in _import_bom(dep, bom_lookup).items():
                managed.setdefault(key, imported)
            continue
        managed[dep.management_key] = dep

    effective: Dict[Tuple[str, str, str, str], DeclaredDependency] = {}
    for dep in dependencies:
        dep = _apply_management(_interpolate_dependency(dep, properties), managed)
        effective[dep.management_key] = dep

    c = descriptor.coordinate
    return EffectiveModel(
        coordinate=DependencyCoordinate(
            _interpolate(c.group, properties),
            c.artifact,
            packaging=c.packaging,
            version=_interpolate(c.version, properties),
        ),
        properties=properties,
        dependencies=list(effective.values()),
        managed=managed,
    )


def _parent_chain(
    descriptor: ProjectDescriptor,
    parent_lookup: Optional[ParentLookup],
) -> List[ProjectDescriptor]:
    chain = [descriptor]
    seen = {descriptor.coordinate.key}
    current = descriptor
    while current.parent is not None and parent_lookup is not None:
        parent = parent_lookup(current.parent)
        if parent is None:
            logger.debug("%s: parent %s not available", current.source, current.parent)
            break
        if parent.coordinate.key in seen:
            raise DescriptorFault(descriptor.source, f"cyclic parent {parent.coordinate}")
        seen.add(parent.coordinate.key)
        chain.append(parent)
        current = parent
    return chain


def _import_bom(
    dep: DeclaredDependency,
    lookup: Optional[ParentLookup],
) -> Dict[Tuple[str, str, str, str], DeclaredDependency]:
    bom = lookup(dep.coordinate) if lookup else None
    if bom is None:
        logger.debug("BOM %s not available; skipped", dep.coordinate)
        return {}
    return build_effective_model(bom, parent_lookup=lookup).managed


def _apply_management(
    dep: DeclaredDependency,
    managed: Dict[Tuple[str, str, str, str], DeclaredDependency],
) -> DeclaredDependency:
    rule = managed.get(dep.management_key)
    if rule is None:
        return dep
    coordinate = dep.coordinate
    if not coordinate.version:
        coordinate = coordinate.with_version(rule.coordinate.version)
    return replace(
        dep,
        coordinate=coordinate,
        scope=dep.scope or rule.scope,
        exclusions=dep.exclusions | rule.exclusions,
    )


# ── Interpolation ───────────────────────────────────────────────────────


def _project_properties(descriptor: ProjectDescriptor) -> Dict[str, str]:
    props = {
        "project.groupId": descriptor.group,
        "project.artifactId": descriptor.artifact,
        "project.version": descriptor.version,
        "project.packaging": descriptor.packaging,
        "pom.groupId": descriptor.group,
        "pom.artifactId": descriptor.artifact,
        "pom.version": descriptor.version,
    }
    if descriptor.parent is not None:
        props["project.parent.groupId"] = descriptor.parent.group
        props["project.parent.version"] = descriptor.parent.version
    return props


def _interpolate(value: str, properties: Dict[str, str]) -> str:
    """Replace ``${name}`` placeholders; unknown names are left untouched."""
    for _ in range(_MAX_INTERPOLATION_DEPTH):
        replaced = _PLACEHOLDER.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
        if replaced == value:
            break
        value = replaced
    return value


def _interpolate_dependency(dep: DeclaredDependency, properties: Dict[str, str]) -> DeclaredDependency:
    c = dep.coordinate
    return replace(
        dep,
        coordinate=DependencyCoordinate(
            _interpolate(c.group, properties),
            _interpolate(c.artifact, properties),
            packaging=_interpolate(c.packaging, properties),
            classifier=_interpolate(c.classifier, properties),
            version=_interpolate(c.version, properties),
        ),
    )


# ── XML helpers ─────────────────────────────────────────────────────────


def _strip_namespaces(root: ET.Element) -> None:
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]


def _text(element: ET.Element, path: str, default: str = "") -> str:
    found = element.find(path)
    if found is None or found.text is None:
        return default
    return found.text.strip() or default


def _properties(element: Optional[ET.Element]) -> Dict[str, str]:
    if element is None:
        return {}
    return {child.tag: (child.text or "").strip() for child in element if isinstance(child.tag, str)}


def _dependencies(element: Optional[ET.Element], source: str) -> List[DeclaredDependency]:
    if element is None:
        return []
    result = []
    for dep in element.findall("dependency"):
        group = _text(dep, "groupId")
        artifact = _text(dep, "artifactId")
        if not group or not artifact:
            raise DescriptorFault(source, "<dependency> without groupId/artifactId")
        scope = _text(dep, "scope")
        try:
            parsed_scope = ScopeType.coerce(scope) if scope else None
        except ScopeFault as exc:
            raise DescriptorFault(source, exc.message) from exc
        exclusions = frozenset(
            (_text(ex, "groupId", "*"), _text(ex, "artifactId", "*"))
            for ex in dep.findall("exclusions/exclusion")
        )
        result.append(
            DeclaredDependency(
                coordinate=DependencyCoordinate(
                    group,
                    artifact,
                    packaging=_text(dep, "type"),
                    classifier=_text(dep, "classifier"),
                    version=_text(dep, "version"),
                ),
                scope=parsed_scope,
                optional=_text(dep, "optional").lower() == "true",
                exclusions=exclusions,
            )
        )
    return result
