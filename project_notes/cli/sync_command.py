"""Sync command orchestration for CLI.

This module provides the SyncCommand class that loads the configuration,
wires the Todoist client and the vault together, runs sync passes through
the SyncEngine and turns the outcome into terminal output and an exit code.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from project_notes.cli.errors import CLIError, ConfigNotFoundError
from project_notes.cli.models import ExitCode
from project_notes.cli.output import OutputHandler
from project_notes.note_mapper.config_loader import ConfigLoader
from project_notes.note_mapper.errors import (
    ConfigError,
    FilesystemError,
    NoteMapperError,
    NoteRootNotFoundError,
    TemplateNotFoundError,
)
from project_notes.note_mapper.index_watcher import IndexWatcher
from project_notes.note_mapper.models import NotesConfig
from project_notes.note_mapper.sync_engine import SyncEngine
from project_notes.note_mapper.vault import Vault, normalize_path
from project_notes.todoist_client.api_wrapper import APIWrapper
from project_notes.todoist_client.auth import Authenticator
from project_notes.todoist_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    TodoistError,
)

logger = logging.getLogger(__name__)

ROOT_FOLDER_QUESTION = (
    "You have not set a folder to store your project notes. "
    "Do you want to use the root folder?"
)


class SyncCommand:
    """Orchestrates sync passes for the CLI.

    The workflow:
        1. Load configuration (asking for the notes folder if it is unset)
        2. Build the Todoist client and the vault
        3. Run one pass, or keep passing every interval in watch mode
        4. Print the report and return the matching exit code

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> sync_cmd = SyncCommand(output_handler=output)
        >>> exit_code = sync_cmd.run(dry_run=True)
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config_path: str = ConfigLoader.DEFAULT_CONFIG_PATH,
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        api_wrapper: Optional[APIWrapper] = None,
    ):
        """Initialize sync command with dependencies.

        Args:
            config_path: Path to configuration YAML file
            output_handler: OutputHandler for terminal output (optional)
            authenticator: Authenticator for the Todoist API (optional)
            api_wrapper: Pre-built APIWrapper (optional, mainly for tests)

        Note:
            Dependencies not given are created from the configuration when
            the command runs.
        """
        self.config_path = config_path
        self.output_handler = output_handler or OutputHandler()
        self.authenticator = authenticator
        self.api_wrapper = api_wrapper

    def run(self, dry_run: bool = False) -> ExitCode:
        """Execute a single sync pass.

        Args:
            dry_run: If True, report what would change without touching the vault

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            config = self._load_config()
            if config is None:
                return ExitCode.GENERAL_ERROR

            engine = self._build_engine(config, dry_run)
            with self.output_handler.spinner("Syncing project notes..."):
                report = engine.run_pass()

            self.output_handler.print_sync_summary(report, dry_run=dry_run)
            return ExitCode.from_report(report)

        except Exception as e:
            return self._handle_error(e)

    def watch(
        self,
        interval: float = 60.0,
        dry_run: bool = False,
        max_passes: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> ExitCode:
        """Keep a live note index and run a pass every interval.

        Runs until interrupted (Ctrl+C) or until max_passes passes are done.
        Unreachable-API failures are reported and retried on the next
        interval; every other aborting error ends the loop.

        Args:
            interval: Seconds between the end of one pass and the next
            dry_run: If True, report what would change without touching the vault
            max_passes: Stop after this many passes (None = run forever)
            sleep: Sleep function, replaceable in tests

        Returns:
            ExitCode of the last pass
        """
        watcher: Optional[IndexWatcher] = None
        exit_code = ExitCode.SUCCESS
        try:
            config = self._load_config()
            if config is None:
                return ExitCode.GENERAL_ERROR

            engine = self._build_engine(config, dry_run)
            if engine.vault.get_folder(engine.note_folder) is None:
                raise NoteRootNotFoundError(engine.note_folder)

            watcher = IndexWatcher(engine.vault, engine.note_folder, engine.archive_path)
            watcher.start()
            self.output_handler.info(
                f"Watching '{engine.note_folder}', syncing every {interval:g}s (Ctrl+C to stop)"
            )

            passes = 0
            while max_passes is None or passes < max_passes:
                passes += 1
                try:
                    report = engine.run_pass(index=watcher.snapshot())
                except (APIUnreachableError, APIAccessError) as e:
                    logger.warning(f"Pass {passes} skipped: {e}")
                    self.output_handler.warning(f"Todoist API not available, retrying in {interval:g}s: {e}")
                    exit_code = ExitCode.NETWORK_ERROR
                else:
                    if not dry_run:
                        watcher.record_report(report)
                    self.output_handler.print_sync_summary(report, dry_run=dry_run)
                    exit_code = ExitCode.from_report(report)

                if max_passes is None or passes < max_passes:
                    sleep(interval)

            return exit_code

        except KeyboardInterrupt:
            logger.info("Watch mode interrupted")
            self.output_handler.print("\nStopped watching.")
            return exit_code

        except Exception as e:
            return self._handle_error(e)

        finally:
            if watcher is not None:
                watcher.stop()

    def _load_config(self) -> Optional[NotesConfig]:
        """Load the configuration and settle an unset notes folder.

        Returns:
            NotesConfig, or None if the user declined to use the vault root

        Raises:
            ConfigNotFoundError: If the configuration file does not exist
            ConfigError: If the configuration is invalid
        """
        logger.info(f"Loading configuration from {self.config_path}")
        self.output_handler.info(f"Loading configuration from {self.config_path}")

        if not Path(self.config_path).exists():
            raise ConfigNotFoundError(self.config_path)

        config = ConfigLoader.load(self.config_path)
        for warning in ConfigLoader.separator_warnings(config.separator):
            self.output_handler.warning(warning)

        if not config.note_folder.strip():
            if not self.output_handler.confirm(ROOT_FOLDER_QUESTION):
                self.output_handler.warning(
                    f"No notes folder set. Set 'note_folder' in {self.config_path} and run again."
                )
                return None
            config.note_folder = '/'
            ConfigLoader.save(self.config_path, config)
            logger.info(f"Notes folder set to vault root in {self.config_path}")

        return config

    def _build_engine(self, config: NotesConfig, dry_run: bool) -> SyncEngine:
        if self.api_wrapper is None:
            if self.authenticator is None:
                self.authenticator = Authenticator(
                    api_token=config.api_token or None,
                    api_url=config.api_url or None,
                )
            self.api_wrapper = APIWrapper(self.authenticator)

        vault = Vault(config.vault_path, dry_run=dry_run)
        if dry_run:
            self.output_handler.info("Dry run: no files will be changed")
        logger.debug(f"Vault {vault.root}, notes folder '{normalize_path(config.note_folder)}'")
        return SyncEngine(config, self.api_wrapper, vault)

    def _handle_error(self, e: Exception) -> ExitCode:
        """Translate an aborting error into output and an exit code."""
        if isinstance(e, InvalidCredentialsError):
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info(
                "Set TODOIST_API_TOKEN or 'api_token' in the configuration file"
            )
            return ExitCode.AUTH_ERROR

        if isinstance(e, (APIUnreachableError, APIAccessError)):
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        if isinstance(e, ConfigNotFoundError):
            logger.error(str(e))
            self.output_handler.print("No sync configuration found.\n")
            self.output_handler.print("To get started, initialize with your vault and notes folder:\n")
            self.output_handler.print("  project-notes --init --vault ~/Notes --folder Projects\n")
            self.output_handler.print("Required environment variables:")
            self.output_handler.print("  TODOIST_API_TOKEN       - API token from Todoist settings\n")
            self.output_handler.print("Run 'project-notes --help' for more options.")
            return ExitCode.GENERAL_ERROR

        if isinstance(e, (ConfigError, FilesystemError)):
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        if isinstance(e, (NoteRootNotFoundError, TemplateNotFoundError)):
            logger.error(str(e))
            self.output_handler.error(f"{e}.")
            return ExitCode.GENERAL_ERROR

        if isinstance(e, (NoteMapperError, TodoistError, CLIError)):
            logger.error(f"Sync error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        logger.exception("Unexpected error during sync")
        self.output_handler.error(f"Unexpected error: {e}")
        return ExitCode.GENERAL_ERROR
