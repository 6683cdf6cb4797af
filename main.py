"""
Command line entry point for sysinventory.

Prints point-in-time storage inventory snapshots as JSON on stdout. Logs go
to stderr and, when configured, to a log file.
"""

import json
import logging
import os
from typing import Any, Optional

import typer

from src.i18n import _, set_language
from src.sysinventory.collection.disk_collector_bsd import DiskCollectorBSD
from src.sysinventory.collection.filesystem_collector_linux import (
    FileSystemCollectorLinux,
)
from src.sysinventory.collection.inventory_collection import InventoryCollector
from src.sysinventory.collection.sources import (
    CapturedSourceProvider,
    FreeBSDSourceProvider,
)
from src.sysinventory.core.config import ConfigManager
from src.sysinventory.utils.logging_formatter import UTCTimestampFormatter

app = typer.Typer(
    add_completion=False, help="sysinventory: storage inventory snapshots"
)

CONFIG_ENV = "SYSINVENTORY_CONFIG"


def setup_logging(config: ConfigManager, verbose: bool = False) -> None:
    """Route log records to stderr and the optional configured log file."""
    level_name = "DEBUG" if verbose else config.get_log_level()
    level = getattr(logging, level_name, logging.INFO)
    formatter = UTCTimestampFormatter(config.get_log_format())

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = config.get_log_file()
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)


def load_config(config_path: Optional[str], verbose: bool) -> ConfigManager:
    """Load configuration and set up logging and language, or exit with code 1."""
    config_path = config_path or os.getenv(CONFIG_ENV)
    try:
        config = ConfigManager(config_path)
    except (FileNotFoundError, ValueError, RuntimeError) as error:
        typer.echo(_("Configuration error: %s") % error, err=True)
        raise typer.Exit(code=1) from error
    set_language(config.get_language())
    setup_logging(config, verbose)
    return config


def _echo_json(config: ConfigManager, payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=config.get_output_indent()))


@app.command("disks")
def disks(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to a sysinventory YAML file."
    ),
    capture_dir: Optional[str] = typer.Option(
        None, "--capture-dir", help="Replay command outputs captured in this directory."
    ),
    diagnostics: bool = typer.Option(
        False, "--diagnostics", help="Include parse diagnostics in the output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Print the disk and partition snapshot."""
    config = load_config(config_path, verbose)
    capture_dir = capture_dir or config.get_capture_dir()
    if capture_dir:
        provider = CapturedSourceProvider(capture_dir)
    else:
        provider = FreeBSDSourceProvider(timeout=config.get_command_timeout())

    snapshot = DiskCollectorBSD(provider).collect()
    _echo_json(config, snapshot.to_dict(include_diagnostics=diagnostics))


@app.command("filesystems")
def filesystems(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to a sysinventory YAML file."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Print mounted file stores (Linux)."""
    config = load_config(config_path, verbose)
    collector = FileSystemCollectorLinux(
        mounts_file=config.get_mounts_file(),
        uuid_dir=config.get_uuid_dir(),
        file_nr_path=config.get_file_nr_path(),
    )
    _echo_json(config, [store.to_dict() for store in collector.get_file_stores()])


@app.command("inventory")
def inventory(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to a sysinventory YAML file."
    ),
    capture_dir: Optional[str] = typer.Option(
        None, "--capture-dir", help="Replay command outputs captured in this directory."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Print everything this platform supports."""
    config = load_config(config_path, verbose)
    collector = InventoryCollector(config, capture_dir=capture_dir)
    payload = collector.get_inventory()
    _echo_json(config, payload)
    if "error" in payload:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
