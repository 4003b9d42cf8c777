"""
Main CLI interface for Sound Companion

Command groups:
- sync: bring the sounds directory up to date with the remote catalog
- sounds: list downloaded sounds
- listen: receive live game state and play sounds for game events
- config: show and validate configuration
"""

import sys
import click
import functools
from typing import Dict, Optional

from tqdm import tqdm

from . import __version__
from .assets.catalog import AssetCatalog
from .assets.remote import HttpCatalogClient
from .audio.player import SoundPlayer
from .config.settings import Settings, get_settings, reload_settings
from .config.state import StateStore
from .events.rules import default_rules
from .events.selector import DEFAULT_BINDINGS, PlaybackSelector, apply_chance_overrides
from .sync.scheduler import is_sync_due
from .sync.synchronizer import AssetSynchronizer, MainThreadDispatcher, SyncResult
from .utils.helpers import format_file_size, format_timestamp
from .utils.logger import configure_from_settings, get_logger, get_current_log_file

logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    KeyboardInterrupt exits with 130, any other exception is logged and
    shown in red before exiting with 1.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except Exception as e:
            logger.error(f"Command failed: {e}", exc_info=e)
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def build_catalog(settings: Settings) -> AssetCatalog:
    return AssetCatalog(settings.get_sounds_directory())


def build_synchronizer(settings: Settings, catalog: AssetCatalog) -> AssetSynchronizer:
    client = HttpCatalogClient(
        settings.sounds.catalog_url,
        timeout=settings.network.request_timeout,
        user_agent=settings.network.user_agent,
        download_timeout=settings.sounds.download_timeout,
    )
    return AssetSynchronizer(client, catalog, max_workers=settings.sounds.concurrency)


def build_selector(settings: Settings, catalog: AssetCatalog) -> PlaybackSelector:
    rules = apply_chance_overrides(default_rules(), settings.events.chances)
    bindings = {**DEFAULT_BINDINGS, **settings.events.bindings}
    return PlaybackSelector(rules, catalog, bindings)


def run_sync(settings: Settings, catalog: AssetCatalog, state: StateStore) -> SyncResult:
    """
    Run one synchronisation pass with output on the current thread

    Status lines are echoed as they arrive, each download gets a progress
    bar, and the sync time is stored only when the pass fully succeeded.
    """
    synchronizer = build_synchronizer(settings, catalog)
    dispatcher = MainThreadDispatcher()
    bars: Dict[str, tqdm] = {}

    def on_progress(message: str) -> None:
        click.echo(message)

    def on_download_progress(file_name: str, written: int, total: Optional[int]) -> None:
        bar = bars.get(file_name)
        if bar is None:
            bar = bars[file_name] = tqdm(
                total=total, desc=file_name, unit='B', unit_scale=True, leave=False, ncols=80
            )
        bar.update(written - bar.n)
        if total is not None and written >= total:
            bar.close()

    def on_complete(success: bool) -> None:
        for bar in bars.values():
            bar.close()
        if success:
            state.set_last_sync()

    try:
        future = synchronizer.synchronize(on_progress, on_complete, on_download_progress, dispatch=dispatcher)
        return dispatcher.run_until_complete(future)
    finally:
        synchronizer.close()


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    Sound Companion - plays sounds when things happen in your game

    Keeps a local sound library in sync with the remote catalog and listens
    to live game state to decide what to play.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"Sound Companion v{__version__}")
        return

    settings = reload_settings(config) if config else get_settings()
    if verbose:
        settings.logging.level = "DEBUG"
        ctx.obj['verbose'] = True
    configure_from_settings()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option('--force', '-f', is_flag=True, help='Sync even if the last sync was recent')
@handle_error
def sync(force):
    """
    Download new sounds and delete removed ones

    Skipped when the last successful sync is more recent than the configured
    sync period, unless --force is given.
    """
    settings = get_settings()
    state = StateStore(settings.get_state_path())
    last_sync = state.get_last_sync()

    if not force and not is_sync_due(last_sync, period=settings.get_sync_period_seconds()):
        click.echo(f"Sounds are up to date (last sync: {format_timestamp(last_sync)})")
        return

    result = run_sync(settings, build_catalog(settings), state)
    if not result.success:
        log_file = get_current_log_file()
        if log_file:
            click.echo(f"Details: {log_file}", err=True)
        sys.exit(1)


@cli.command()
@handle_error
def sounds():
    """List downloaded sounds"""
    settings = get_settings()
    catalog = build_catalog(settings)
    assets = catalog.list_all()

    if not assets:
        click.echo(f"No sounds in {catalog.directory}. Run 'sound-companion sync' first.")
        return

    for asset in assets:
        size = asset.path.stat().st_size if asset.exists() else 0
        click.echo(f"  {asset.name:<30} {format_file_size(size):>10}  {asset.file_name}")
    click.echo(f"\n{len(assets)} sound(s) in {catalog.directory}")


@cli.command()
@click.option('--host', help='Address to listen on')
@click.option('--port', type=int, help='Port to listen on')
@click.option('--no-sync', is_flag=True, help='Skip the startup sync check')
@handle_error
def listen(host, port, no_sync):
    """
    Play sounds for live game events

    Runs a sync first when one is due, then serves the game state endpoint
    until interrupted.
    """
    from .game.server import GameStateServer

    settings = get_settings()
    catalog = build_catalog(settings)

    if not no_sync:
        state = StateStore(settings.get_state_path())
        if is_sync_due(state.get_last_sync(), period=settings.get_sync_period_seconds()):
            run_sync(settings, catalog, state)

    player = SoundPlayer(volume_db=settings.playback.volume_db, enabled=settings.playback.enabled)
    server = GameStateServer(build_selector(settings, catalog), player.play, settings.gsi.auth_token)
    server.run(host or settings.gsi.host, port or settings.gsi.port)


@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
@handle_error
def show():
    """Show the active configuration"""
    settings = get_settings()
    state = StateStore(settings.get_state_path())

    click.echo(str(settings))
    click.echo(f"Sounds directory: {settings.get_sounds_directory().resolve()}")
    click.echo(f"Config directory: {settings.get_config_directory()}")
    click.echo(f"Sync period: {settings.sounds.sync_period_hours}h")
    click.echo(f"Last sync: {format_timestamp(state.get_last_sync())}")
    for rule in apply_chance_overrides(default_rules(), settings.events.chances):
        bound = {**DEFAULT_BINDINGS, **settings.events.bindings}.get(rule.name, [])
        click.echo(f"  {rule.name:<20} chance={rule.chance:.2f} sounds={', '.join(bound) or '-'}")


@config.command()
def validate():
    """Validate the configuration"""
    errors = get_settings().validate()
    if errors:
        click.echo(click.style("Configuration validation errors:", fg='red'))
        for error in errors:
            click.echo(f"  - {error}")
        sys.exit(1)
    click.echo(click.style("Configuration is valid", fg='green'))


if __name__ == '__main__':
    cli()
