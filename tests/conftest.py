"""
Shared test fixtures and helpers for the packwright test suite.
"""

import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional
from xml.sax.saxutils import escape

import pytest

from packwright.config import PackwrightConfig


POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"


# ============================================================================
# POM / Jar Helpers
# ============================================================================


def _dependency_xml(dep: dict) -> str:
    parts = [
        f"<groupId>{dep['group']}</groupId>",
        f"<artifactId>{dep['artifact']}</artifactId>",
    ]
    for key, tag in (("version", "version"), ("type", "type"),
                     ("classifier", "classifier"), ("scope", "scope")):
        if dep.get(key):
            parts.append(f"<{tag}>{escape(dep[key])}</{tag}>")
    if dep.get("optional"):
        parts.append("<optional>true</optional>")
    if dep.get("exclusions"):
        exclusions = "".join(
            f"<exclusion><groupId>{g}</groupId><artifactId>{a}</artifactId></exclusion>"
            for g, a in dep["exclusions"]
        )
        parts.append(f"<exclusions>{exclusions}</exclusions>")
    return "<dependency>" + "".join(parts) + "</dependency>"


def _dependencies_xml(deps: Iterable[dict]) -> str:
    deps = list(deps)
    if not deps:
        return ""
    return "<dependencies>" + "".join(_dependency_xml(d) for d in deps) + "</dependencies>"


def _properties_xml(properties: Optional[Dict[str, str]]) -> str:
    if not properties:
        return ""
    return "<properties>" + "".join(
        f"<{k}>{escape(v)}</{k}>" for k, v in properties.items()
    ) + "</properties>"


def pom_xml(
    group: str,
    artifact: str,
    version: str,
    *,
    packaging: str = "jar",
    dependencies: Iterable[dict] = (),
    managed: Iterable[dict] = (),
    properties: Optional[Dict[str, str]] = None,
    profiles: Iterable[dict] = (),
    parent: Optional[dict] = None,
) -> str:
    """Render a minimal POM."""
    body = []
    if parent:
        body.append(
            "<parent>"
            f"<groupId>{parent['group']}</groupId>"
            f"<artifactId>{parent['artifact']}</artifactId>"
            f"<version>{parent['version']}</version>"
            + (f"<relativePath>{parent['relative_path']}</relativePath>" if "relative_path" in parent else "")
            + "</parent>"
        )
    if group:
        body.append(f"<groupId>{group}</groupId>")
    body.append(f"<artifactId>{artifact}</artifactId>")
    if version:
        body.append(f"<version>{version}</version>")
    body.append(f"<packaging>{packaging}</packaging>")
    body.append(_properties_xml(properties))
    managed = list(managed)
    if managed:
        body.append(f"<dependencyManagement>{_dependencies_xml(managed)}</dependencyManagement>")
    body.append(_dependencies_xml(dependencies))
    profiles = list(profiles)
    if profiles:
        rendered = []
        for profile in profiles:
            activation = (
                "<activation><activeByDefault>true</activeByDefault></activation>"
                if profile.get("active_by_default") else ""
            )
            rendered.append(
                f"<profile><id>{profile['id']}</id>{activation}"
                f"{_properties_xml(profile.get('properties'))}"
                f"{_dependencies_xml(profile.get('dependencies', ()))}</profile>"
            )
        body.append("<profiles>" + "".join(rendered) + "</profiles>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<project xmlns="{POM_NAMESPACE}"><modelVersion>4.0.0</modelVersion>'
        + "".join(body)
        + "</project>"
    )


def write_jar(path: Path, entries: Dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


class RepositoryLayout:
    """Publishes artifacts into a throwaway Maven-layout directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def version_dir(self, group: str, artifact: str, version: str) -> Path:
        return self.root.joinpath(*group.split(".")) / artifact / version

    def publish(
        self,
        group: str,
        artifact: str,
        version: str,
        *,
        packaging: str = "jar",
        classifier: str = "",
        entries: Optional[Dict[str, bytes]] = None,
        with_pom: bool = True,
        with_jar: bool = True,
        **pom_options,
    ) -> Optional[Path]:
        directory = self.version_dir(group, artifact, version)
        directory.mkdir(parents=True, exist_ok=True)
        if with_pom:
            (directory / f"{artifact}-{version}.pom").write_text(
                pom_xml(group, artifact, version, packaging=packaging, **pom_options),
                encoding="utf-8",
            )
        if packaging == "pom" or not with_jar:
            return None
        suffix = f"-{classifier}" if classifier else ""
        if entries is None:
            entries = {f"{artifact.replace('-', '_')}/Marker.class": f"{group}:{artifact}:{version}".encode()}
        return write_jar(directory / f"{artifact}-{version}{suffix}.jar", entries)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def repository(tmp_path) -> RepositoryLayout:
    return RepositoryLayout(tmp_path / "repository")


@pytest.fixture
def config(repository) -> PackwrightConfig:
    return PackwrightConfig(local_repository=str(repository.root))


@pytest.fixture
def write_pom(tmp_path):
    """Write a project POM under ``tmp_path/project`` and return its path."""

    def _write(artifact: str = "app", version: str = "1.0.0", group: str = "com.example", **options) -> Path:
        path = tmp_path / "project" / "pom.xml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(pom_xml(group, artifact, version, **options), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def jar_file(tmp_path):
    """Write a jar with the given entries and return its path."""

    def _write(name: str, entries: Dict[str, bytes]) -> Path:
        return write_jar(tmp_path / "jars" / name, entries)

    return _write
