"""YAML configuration loading and validation.

This module handles loading and saving the project notes configuration, a
flat YAML record:

    vault_path: "~/Notes"
    note_folder: "Projects"
    nested: true
    separator: " ~ "
    deleted_project_handling: archive
    archive_folder: "__ArchivedNotes"
    template_file: ""
    link_tasks: false
    api_token: ""
    api_url: "https://api.todoist.com/api/v1"
"""

import logging
import os
import re
from typing import Any, Dict, List

import yaml

from .errors import ConfigError, FilesystemError
from .models import DeletedProjectHandling, NotesConfig

logger = logging.getLogger(__name__)

# Characters that cannot appear in a file name segment
FORBIDDEN_SEPARATOR_CHARS = re.compile(r'[\\/:]')

# Characters that break wiki-links when they appear in a note name
LINK_BREAKING_CHARS = re.compile(r'[#^\[\]|]')


class ConfigLoader:
    """Handles configuration file loading, validation, and saving."""

    DEFAULT_CONFIG_PATH = '.project-notes/config.yaml'

    STRING_FIELDS = (
        'vault_path', 'note_folder', 'separator', 'archive_folder',
        'template_file', 'api_token', 'api_url',
    )
    BOOL_FIELDS = ('nested', 'link_tasks')

    @classmethod
    def load(cls, config_path: str) -> NotesConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            NotesConfig object with parsed configuration

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(
                config_path,
                'read',
                'Configuration file not found'
            )
        except PermissionError:
            raise FilesystemError(
                config_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'read',
                str(e)
            )

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if config_dict is None:
            config_dict = {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, config: NotesConfig) -> None:
        """Save configuration to a YAML file.

        Args:
            config_path: Path to the YAML configuration file
            config: NotesConfig object to save

        Raises:
            FilesystemError: If file cannot be written
        """
        config_dict = {
            'vault_path': config.vault_path,
            'note_folder': config.note_folder,
            'nested': config.nested,
            'separator': config.separator,
            'deleted_project_handling': config.deleted_project_handling.value,
            'archive_folder': config.archive_folder,
            'template_file': config.template_file,
            'link_tasks': config.link_tasks,
            'api_token': config.api_token,
            'api_url': config.api_url,
        }

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    config_dir,
                    'create_directory',
                    str(e)
                )

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise FilesystemError(
                config_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise FilesystemError(
                config_path,
                'write',
                str(e)
            )

    @classmethod
    def separator_warnings(cls, separator: str) -> List[str]:
        """Return non-fatal warnings about the flat-mode separator."""
        if LINK_BREAKING_CHARS.search(separator):
            return [
                "Wiki-links will break if the separator includes any of these: # ^ [ ] |"
            ]
        return []

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> NotesConfig:
        """Parse and validate configuration dictionary.

        Missing fields take their defaults from NotesConfig.

        Raises:
            ConfigError: If configuration is invalid
        """
        defaults = NotesConfig()
        values: Dict[str, Any] = {}

        for name in cls.STRING_FIELDS:
            raw = config_dict.get(name, getattr(defaults, name))
            if raw is None:
                raw = ''
            if isinstance(raw, (dict, list, bool)):
                raise ConfigError(
                    f"Field '{name}' must be a string, got {type(raw).__name__}",
                    name
                )
            values[name] = str(raw)

        for name in cls.BOOL_FIELDS:
            raw = config_dict.get(name, getattr(defaults, name))
            if not isinstance(raw, bool):
                raise ConfigError(
                    f"Field '{name}' must be true or false, got {raw!r}",
                    name
                )
            values[name] = raw

        handling_raw = config_dict.get(
            'deleted_project_handling', defaults.deleted_project_handling.value
        )
        try:
            handling = DeletedProjectHandling(str(handling_raw).lower())
        except ValueError:
            allowed = ', '.join(h.value for h in DeletedProjectHandling)
            raise ConfigError(
                f"Unknown value {handling_raw!r} (expected one of: {allowed})",
                'deleted_project_handling'
            )

        if not values['archive_folder'].strip():
            raise ConfigError(
                "Field 'archive_folder' cannot be empty",
                'archive_folder'
            )

        if not values['vault_path'].strip():
            raise ConfigError(
                "Field 'vault_path' cannot be empty",
                'vault_path'
            )

        separator = values['separator']
        if FORBIDDEN_SEPARATOR_CHARS.search(separator):
            raise ConfigError(
                "The separator string cannot contain any of these characters: /, \\, :",
                'separator'
            )
        if not values['nested'] and not separator:
            raise ConfigError(
                "A separator is required when nested folders are disabled",
                'separator'
            )
        for warning in cls.separator_warnings(separator):
            logger.warning(warning)

        return NotesConfig(
            deleted_project_handling=handling,
            **values
        )
