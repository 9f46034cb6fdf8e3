"""Packwright CLI - Main Entry Point.

Commands:
    resolve  - Resolve coordinates against a project descriptor
    inspect  - List the entries of an archive file
"""

import logging
import sys
from typing import Optional

import click

from .. import __version__, __cli_name__
from ..archives import import_archive
from ..config import load_config
from ..faults import Fault
from ..resolver import LocalRepository, ScopeType, load_descriptor
from .colors import success, error, warning, kv, bullet, _CHECK, _CROSS


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Assemble deployable archives and resolve their dependencies."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Commands
# ============================================================================

@cli.command('resolve')
@click.argument('pom', type=click.Path(dir_okay=False))
@click.argument('coordinates', nargs=-1, required=True)
@click.option('--profile', '-P', 'profiles', multiple=True, help='Activate a descriptor profile')
@click.option(
    '--scope', '-s', 'scopes', multiple=True,
    type=click.Choice([s.value for s in ScopeType]),
    help='Restrict to dependencies declared in this scope',
)
@click.option('--repository', type=click.Path(file_okay=False), help='Local repository directory')
@click.option('--no-transitive', is_flag=True, help='Resolve only the named artifacts')
@click.pass_context
def resolve(
    ctx,
    pom: str,
    coordinates: tuple,
    profiles: tuple,
    scopes: tuple,
    repository: Optional[str],
    no_transitive: bool,
):
    """
    Resolve COORDINATES (group:artifact[:...]) declared by POM.

    Examples:
      packwright resolve pom.xml org.acme:core
      packwright resolve pom.xml org.acme:core -s compile -s runtime -P prod
    """
    config = load_config()
    repo = LocalRepository(repository or config.local_repository)
    failed = 0

    try:
        stage = load_descriptor(pom, list(profiles), repository=repo)
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)
    if scopes:
        stage = stage.with_scopes(*scopes)

    for coordinate in coordinates:
        try:
            resolved = stage.resolve(coordinate)
            strategy = resolved.without_transitivity() if no_transitive else resolved.with_transitivity()
            files = strategy.as_files()
        except Fault as e:
            failed += 1
            warning(f"  {_CROSS} {coordinate}: {e.message}")
            continue
        success(f"  {_CHECK} {resolved.coordinate}")
        for path in files:
            bullet(str(path))

    if failed:
        sys.exit(1)


@cli.command('inspect')
@click.argument('archive', type=click.Path(exists=True, dir_okay=False))
def inspect(archive: str):
    """
    List the entries of ARCHIVE.

    Examples:
      packwright inspect dist/app.jar
    """
    try:
        loaded = import_archive(archive)
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        sys.exit(1)

    kv("Archive", loaded.name)
    kv("Entries", str(len(loaded)))
    kv("Digest", loaded.digest)
    for path in loaded.paths():
        bullet(path)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
