"""CLI commands for batheart."""

import click


def _load_startup_config():
    """Load config for startup, creating a default file if missing.

    Config problems at startup are fatal.
    """
    from batheart import logging as console
    from batheart.config import Config, ConfigError, load_or_create

    path = Config().config_path
    try:
        config, created = load_or_create(path)
    except ConfigError as e:
        console.config_failed("parse", e)
        raise SystemExit(1) from e
    except OSError as e:
        console.config_failed("load", e)
        raise SystemExit(1) from e

    if created:
        console.config_created(str(path))
    return config


def _run_daemon() -> None:
    import asyncio

    from batheart.daemon import run_daemon

    config = _load_startup_config()
    asyncio.run(run_daemon(config))


@click.group(invoke_without_command=True)
@click.version_option(package_name="batheart")
@click.pass_context
def main(ctx) -> None:
    """Keep the battery healthy by toggling conservation mode at a threshold.

    With no command, runs the daemon.
    """
    if ctx.invoked_subcommand is None:
        _run_daemon()


@main.command()
def daemon() -> None:
    """Run the background poller."""
    _run_daemon()


@main.command()
def status() -> None:
    """Read the battery once and show what the daemon would do."""
    from batheart import logging as console
    from batheart.battery import BatteryReader, ReadError
    from batheart.config import Config, ConfigError
    from batheart.conservation import CONSERVATION_PATH
    from batheart.threshold import decide, in_threshold_range

    defaults = Config()
    try:
        config = Config.load(defaults.config_path)
    except FileNotFoundError:
        config = defaults
    except (ConfigError, OSError) as e:
        console.config_failed("load", e)
        raise SystemExit(1) from e

    try:
        sample = BatteryReader().sample()
    except ReadError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e

    decision = decide(sample, previous_capacity=-1, threshold=config.threshold)

    click.echo(f"Capacity: {sample.capacity}%")
    click.echo(f"Charging: {'yes' if sample.charging else 'no'}")
    click.echo(f"Threshold: {config.threshold}%")
    at_threshold = in_threshold_range(sample.capacity, config.threshold)
    click.echo(f"At threshold: {'yes' if at_threshold else 'no'}")
    click.echo(f"Conservation mode: {'enable' if decision.enable_conservation else 'disable'}")
    click.echo(f"Next poll in: {decision.next_interval:g}s")
    click.echo(f"Control file: {CONSERVATION_PATH}")


@main.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
def config_show() -> None:
    """Display current configuration."""
    from batheart import logging as console
    from batheart.config import Config, ConfigError

    cfg = Config()
    exists = cfg.config_path.exists()
    if exists:
        try:
            cfg = Config.load(cfg.config_path)
        except (ConfigError, OSError) as e:
            console.config_failed("load", e)
            raise SystemExit(1) from e

    click.echo(f"Config file: {cfg.config_path}")
    click.echo(f"Exists: {exists}")
    click.echo(f"Log file: {cfg.log_path}")
    click.echo()
    click.echo(f"threshold = {cfg.threshold}")


@config.command("edit")
def config_edit() -> None:
    """Open config file in editor."""
    import os
    import subprocess

    from batheart.config import Config

    cfg = Config()

    if not cfg.config_path.exists():
        cfg.save()
        click.echo(f"Created default config at {cfg.config_path}")

    editor = os.environ.get("EDITOR", "nano")
    subprocess.run([editor, str(cfg.config_path)])


@config.command("reset")
@click.confirmation_option(prompt="Reset config to defaults?")
def config_reset() -> None:
    """Reset configuration to defaults."""
    from batheart.config import Config

    cfg = Config()
    cfg.save()
    click.echo(f"Config reset to defaults at {cfg.config_path}")
