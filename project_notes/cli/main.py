"""Main CLI entry point for the project-notes command.

This module provides the Typer application that serves as the entry point
for the project-notes command-line tool. It uses options on the main command
rather than subcommands for a simpler user experience.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from project_notes import __version__
from project_notes.cli.errors import InitError
from project_notes.cli.init_command import InitCommand
from project_notes.cli.models import ExitCode
from project_notes.cli.output import OutputHandler
from project_notes.cli.sync_command import SyncCommand
from project_notes.note_mapper.config_loader import ConfigLoader

# Create Typer app - no_args_is_help=False allows running without args
app = typer.Typer(
    name="project-notes",
    help="""Keep one markdown note per Todoist project, organized like your project tree.

QUICK START:
  project-notes --init --vault <dir> --folder <folder>   # Initialize
  project-notes                                          # Update project notes
  project-notes --dry-run                                # Preview changes
  project-notes --watch                                  # Keep notes updated""",
    add_completion=False,
    rich_markup_mode=None,  # Plain help output, no Rich markup
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)

# Help message for when no arguments provided
GETTING_STARTED_MESSAGE = """project-notes                                          # Update project notes

--init --vault <dir> [--folder <folder>]               # Initialize
--dry-run                                              # Preview changes
--watch [--interval <seconds>]                         # Keep notes updated
--help                                                 # Show all options

Example:
  project-notes --init --vault ~/Notes --folder Projects

Note: set TODOIST_API_TOKEN (or put it in .env) before the first sync."""


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'project_notes' namespace logger to avoid affecting
    third-party libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    # Configure app-specific logger (not root) so libraries keep their levels
    app_logger = logging.getLogger("project_notes")
    app_logger.setLevel(level)
    app_logger.handlers.clear()

    # Define log format
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    # File handler (if logdir is specified)
    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Generate timestamped filename using local timezone
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"project-notes_{timestamp}.log"

        # Add file handler with more detailed format
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _run_init(
    config_path: str,
    vault_path: str,
    note_folder: Optional[str],
    flat: bool,
    link_tasks: bool,
    verbosity: int,
    no_color: bool,
) -> None:
    # Configure logging
    _configure_logging(verbosity)

    # Create output handler
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        output.info("Initializing project notes configuration...")
        # Create init command and write the configuration
        init_cmd = InitCommand(config_path)
        config = init_cmd.run(
            vault_path=vault_path,
            note_folder=note_folder,
            nested=not flat,
            link_tasks=link_tasks,
        )

        # Success
        output.success("Configuration initialized successfully")
        output.info(f"  Config file: {init_cmd.config_path}")
        output.info(f"  Vault: {config.vault_path}")
        output.info(f"  Notes folder: {config.note_folder or '(not set)'}")
        output.info("")
        output.info("Next steps:")
        output.info(f"  1. Review {init_cmd.config_path}")
        output.info("  2. Set TODOIST_API_TOKEN")
        output.info("  3. Run 'project-notes' to create your project notes")

    except InitError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def main_command(
    init: bool = typer.Option(
        False,
        "--init",
        help="Initialize configuration (requires --vault)",
    ),
    vault_path: Optional[str] = typer.Option(
        None,
        "--vault",
        help="Vault directory (used with --init)",
        metavar="DIR",
    ),
    note_folder: Optional[str] = typer.Option(
        None,
        "--folder",
        help="Notes folder inside the vault (used with --init)",
        metavar="FOLDER",
    ),
    flat: bool = typer.Option(
        False,
        "--flat",
        help="With --init: put all notes in one folder instead of nesting",
    ),
    link_tasks: bool = typer.Option(
        False,
        "--link-tasks",
        help="With --init: link Todoist tasks to their project notes",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Preview changes without applying them",
    ),
    watch: bool = typer.Option(
        False,
        "--watch",
        help="Keep running and update notes every --interval seconds",
    ),
    interval: float = typer.Option(
        60.0,
        "--interval",
        help="Seconds between passes in --watch mode",
        min=1.0,
    ),
    config_path: str = typer.Option(
        ConfigLoader.DEFAULT_CONFIG_PATH,
        "--config",
        help="Path to the configuration file",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Keep one markdown note per Todoist project, organized like your project tree.

    \b
    QUICK START:
      project-notes --init --vault <dir> --folder <folder>   # Initialize
      project-notes                                          # Update project notes
      project-notes --dry-run                                # Preview changes
      project-notes --watch --interval 300                   # Keep notes updated
    """
    # Handle --version
    if version:
        typer.echo(f"project-notes version {__version__}")
        raise typer.Exit()

    # Handle --init (requires --vault)
    if init or vault_path is not None:
        if not init or vault_path is None:
            missing = "--init" if not init else "--vault"
            typer.echo(f"Error: Missing required option: {missing}", err=True)
            typer.echo("")
            typer.echo("Example:")
            typer.echo("  project-notes --init --vault ~/Notes --folder Projects")
            raise typer.Exit(ExitCode.GENERAL_ERROR)

        _run_init(config_path, vault_path, note_folder, flat, link_tasks, verbosity, no_color)
        return

    # No arguments and no config yet: show getting started message
    has_sync_options = dry_run or watch or logdir is not None
    if not has_sync_options and verbosity == 0 and not os.path.exists(config_path):
        typer.echo(GETTING_STARTED_MESSAGE)
        raise typer.Exit()

    # Configure logging
    _configure_logging(verbosity, logdir)

    # Create output handler with verbosity settings
    output = OutputHandler(verbosity=verbosity, no_color=no_color)
    sync_cmd = SyncCommand(config_path=config_path, output_handler=output)

    # Run sync (once, or repeatedly in watch mode)
    if watch:
        exit_code = sync_cmd.watch(interval=interval, dry_run=dry_run)
    else:
        exit_code = sync_cmd.run(dry_run=dry_run)

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


if __name__ == "__main__":
    main()
