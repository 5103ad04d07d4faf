"""Shadowlink CLI for importing and exporting proxy profiles.

Provides commands to import share-links and JSON configs into the
profile store, and to list and export stored profiles.
"""

import logging
import sys
from pathlib import Path

import click

from shadowlink.config.loader import load_config
from shadowlink.config.settings import ShadowlinkSettings
from shadowlink.parsing.json_config import ProfileImportError
from shadowlink.services.profile_service import ProfileService
from shadowlink.storage.paths import get_log_dir
from shadowlink.storage.paths import get_profiles_dir
from shadowlink.storage.profile_store import JsonProfileStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: ShadowlinkSettings) -> None:
    """Configure root logging from settings.

    Logs go to stderr, and additionally to logs/shadowlink.log when
    log_to_file is enabled.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_to_file:
        handlers.append(logging.FileHandler(get_log_dir() / "shadowlink.log", encoding="utf-8"))

    logging.basicConfig(
        level=settings.log_level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_service(settings: ShadowlinkSettings) -> ProfileService:
    """Create a ProfileService on the configured store directory."""
    store_dir = Path(settings.store_dir) if settings.store_dir else get_profiles_dir()
    return ProfileService(JsonProfileStore(store_dir))


class AppContext:
    """Objects shared by all commands of one invocation."""

    def __init__(self, settings: ShadowlinkSettings) -> None:
        self.settings = settings
        self.service = build_service(settings)


pass_app = click.make_pass_decorator(AppContext)


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Config file")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None):
    """Shadowlink - Import and export shadowsocks profiles."""
    settings = load_config(config_path)
    configure_logging(settings)
    ctx.obj = AppContext(settings)


@cli.command("import-links")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@pass_app
def import_links(app: AppContext, source):
    """Import every ss:// link found in SOURCE (default: stdin)."""
    profiles = app.service.import_links(source.read(), app.settings.feature_template())
    for profile in profiles:
        click.echo(f"Imported {profile.id}: {profile.formatted_name}")
    click.echo(f"{len(profiles)} profiles imported")


@cli.command("import-json")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@pass_app
def import_json(app: AppContext, source):
    """Import profiles from the JSON config in SOURCE (default: stdin)."""
    try:
        profiles = app.service.import_json(source.read(), app.settings.feature_template())
    except ProfileImportError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for profile in profiles:
        suffix = f" (UDP fallback: {profile.udp_fallback})" if profile.udp_fallback is not None else ""
        click.echo(f"Imported {profile.id}: {profile.formatted_name}{suffix}")
    click.echo(f"{len(profiles)} profiles imported")


@cli.command("list")
@click.option("--all", "include_obsolete", is_flag=True, help="Include obsolete subscription profiles")
@pass_app
def list_profiles(app: AppContext, include_obsolete: bool):
    """List stored profiles."""
    profiles = app.service.list_profiles(include_obsolete=include_obsolete)
    if not profiles:
        click.echo("No profiles stored")
        return

    for profile in profiles:
        click.echo(f"{profile.id:>4}  {profile.formatted_name}  {profile.formatted_address}")


@cli.command("export-links")
@pass_app
def export_links(app: AppContext):
    """Print the share-link of every active profile."""
    for link in app.service.export_links():
        click.echo(link)


@cli.command("export-json")
@click.argument("ids", type=int, nargs=-1)
@pass_app
def export_json(app: AppContext, ids: tuple[int, ...]):
    """Print profiles IDS (default: all active) as a JSON config."""
    profiles = None
    if ids:
        profiles = []
        for id in ids:
            profile = app.service.get_profile(id)
            if profile is None:
                click.echo(f"Error: Profile not found: {id}", err=True)
                sys.exit(1)
            profiles.append(profile)

    click.echo(app.service.export_json(profiles))


@cli.command()
@click.argument("id", type=int)
@pass_app
def delete(app: AppContext, id: int):
    """Delete profile ID."""
    if not app.service.delete_profile(id):
        click.echo(f"Error: Profile not found: {id}", err=True)
        sys.exit(1)
    click.echo(f"Deleted profile {id}")


@cli.command()
@click.confirmation_option(prompt="Delete all stored profiles?")
@pass_app
def clear(app: AppContext):
    """Delete every stored profile."""
    count = app.service.clear_profiles()
    click.echo(f"Deleted {count} profiles")


if __name__ == "__main__":
    cli()
