"""InitCommand for configuration initialization.

This module implements the --init option: it checks the vault directory,
makes sure the notes folder exists, and writes .project-notes/config.yaml.
"""

import logging
import os
from typing import Optional

from project_notes.note_mapper.config_loader import ConfigLoader
from project_notes.note_mapper.errors import FilesystemError
from project_notes.note_mapper.models import NotesConfig
from project_notes.note_mapper.vault import Vault, normalize_path
from .errors import InitError

logger = logging.getLogger(__name__)


class InitCommand:
    """Handles initialization of the sync configuration.

    Example:
        >>> init = InitCommand()
        >>> init.run(vault_path="~/Notes", note_folder="Projects")
    """

    DEFAULT_CONFIG_PATH = ConfigLoader.DEFAULT_CONFIG_PATH

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the init command.

        Args:
            config_path: Optional config file path (defaults to .project-notes/config.yaml)
        """
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH

    def _check_config_exists(self) -> None:
        if os.path.exists(self.config_path):
            raise InitError(
                f"Configuration file already exists at {self.config_path}\n"
                "Please delete it first if you want to reinitialize."
            )

    def run(
        self,
        vault_path: str,
        note_folder: Optional[str] = None,
        nested: bool = True,
        link_tasks: bool = False,
    ) -> NotesConfig:
        """Create the sync configuration.

        When no notes folder is given, the configuration leaves it empty and
        the first sync asks whether to use the vault root.

        Args:
            vault_path: Directory acting as the vault
            note_folder: Vault-relative folder for project notes
            nested: Use nested folders (True) or flat names (False)
            link_tasks: Link Todoist tasks to their project notes

        Returns:
            The configuration that was written

        Raises:
            InitError: If initialization fails at any step
        """
        self._check_config_exists()

        vault_dir = os.path.abspath(os.path.expanduser(vault_path))
        if not os.path.isdir(vault_dir):
            raise InitError(
                f"Vault directory not found: {vault_dir}\n"
                "Please point --vault at an existing directory."
            )

        folder = ""
        if note_folder is not None and note_folder.strip():
            folder = normalize_path(note_folder)
            try:
                Vault(vault_dir).create_folder(folder)
            except FilesystemError as e:
                raise InitError(f"Failed to create notes folder '{folder}': {e}")
            logger.info(f"Notes folder ready: {folder}")

        config = NotesConfig(
            vault_path=vault_dir,
            note_folder=folder,
            nested=nested,
            link_tasks=link_tasks,
        )

        try:
            ConfigLoader.save(self.config_path, config)
        except FilesystemError as e:
            raise InitError(f"Failed to save configuration: {e}")

        logger.info(f"Configuration saved to {self.config_path}")
        return config
