"""YAML frontmatter parsing and generation for project notes.

Project notes carry the Todoist project ID in their frontmatter:

    ---
    todoist-project-id: '2203306141'
    ---

This module reads that field back, and builds the content of new notes,
merging in the frontmatter fields and body of an optional template.
"""

import re
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import FrontmatterError
from .models import NoteTemplate


class FrontmatterHandler:
    """Handles YAML frontmatter operations for project notes.

    Only one field is owned by the sync engine, ``todoist-project-id``.
    Everything else in a note's frontmatter belongs to the user and is
    never rewritten.
    """

    PROJECT_ID_FIELD = 'todoist-project-id'

    # Regex pattern to match YAML frontmatter (between --- delimiters).
    # The closing delimiter may end the file without a trailing newline.
    FRONTMATTER_PATTERN = re.compile(
        r'^---[ \t]*\n(?:(.*?)\n)?---[ \t]*(?:\n|\Z)',
        re.DOTALL
    )

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                "<yaml>",
                f"YAML structure exceeds maximum depth of {max_depth}"
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def extract_frontmatter_and_content(
        cls,
        content: str,
        file_path: str = "<unknown>"
    ) -> Tuple[Dict[str, Any], str]:
        """Extract frontmatter dict and body separately.

        Args:
            content: Full note content including frontmatter
            file_path: Path used in error messages

        Returns:
            Tuple of (frontmatter_dict, body).
            Returns ({}, content) if no frontmatter found.

        Raises:
            FrontmatterError: If the frontmatter is not a valid YAML mapping
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content

        frontmatter_str = match.group(1) or ''
        body = content[match.end():]

        try:
            frontmatter = yaml.safe_load(frontmatter_str)
        except yaml.YAMLError as e:
            raise FrontmatterError(file_path, f"Invalid YAML syntax: {str(e)}")

        if frontmatter is None:
            return {}, body

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        try:
            cls._validate_yaml_depth(frontmatter)
        except FrontmatterError as e:
            raise FrontmatterError(file_path, e.message)

        return frontmatter, body

    @classmethod
    def get_project_id(cls, content: str, file_path: str = "<unknown>") -> Optional[str]:
        """Return the Todoist project ID stored in a note, if any.

        Unquoted numeric IDs come back from YAML as int; they are converted
        to str so they compare equal to the IDs the API returns.

        Args:
            content: Full note content
            file_path: Path used in error messages

        Returns:
            Project ID string, or None if the field is absent or empty

        Raises:
            FrontmatterError: If the frontmatter is malformed
        """
        frontmatter, _ = cls.extract_frontmatter_and_content(content, file_path)
        value = frontmatter.get(cls.PROJECT_ID_FIELD)
        if value is None or isinstance(value, (dict, list)):
            return None
        value = str(value).strip()
        return value or None

    @classmethod
    def parse_template(cls, content: str, file_path: str = "<template>") -> NoteTemplate:
        """Split a template file into extra frontmatter fields and body.

        Raises:
            FrontmatterError: If the template frontmatter is malformed
        """
        fields, body = cls.extract_frontmatter_and_content(content, file_path)
        fields = {k: v for k, v in fields.items() if k != cls.PROJECT_ID_FIELD}
        return NoteTemplate(fields=fields, body=body)

    @classmethod
    def build_note(cls, project_id: str, template: Optional[NoteTemplate] = None) -> str:
        """Generate the content of a new project note.

        The project ID is always the first frontmatter field; template
        fields follow in their original order, then the template body.

        Args:
            project_id: Todoist project ID
            template: Optional template for extra fields and body

        Returns:
            Full note content
        """
        frontmatter: Dict[str, Any] = {cls.PROJECT_ID_FIELD: str(project_id)}
        body = ""
        if template is not None:
            frontmatter.update(template.fields)
            body = template.body

        yaml_str = yaml.safe_dump(
            frontmatter,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )
        return f"---\n{yaml_str}---\n{body}"
