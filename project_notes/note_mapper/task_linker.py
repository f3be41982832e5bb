"""Linking of Todoist tasks back to their project notes.

The first line of a linked task's description is a marker of the form
``Project note: [[<note name>]]``. Re-running the linker rewrites that line in
place, so a renamed note never leaves a stale second marker behind.
"""

import logging
from typing import Any, Dict, Optional

from project_notes.todoist_client.api_wrapper import APIWrapper
from project_notes.todoist_client.errors import SyncError
from .models import SyncContext, TaskRecord
from .vault import basename

logger = logging.getLogger(__name__)

MARKER_PREFIX = "Project note: "


def build_marker(note_path: str) -> str:
    """Marker line pointing at the note ('Work/Website.md' -> 'Project note: [[Website]]')."""
    return f"{MARKER_PREFIX}[[{basename(note_path)}]]"


def apply_marker(description: Optional[str], marker: str) -> str:
    """Put marker on the first line of description.

    An existing marker line is replaced; otherwise the marker is prepended.
    All other lines are left untouched.

    Examples:
        >>> apply_marker("Project note: [[Old]]\\nnotes", "Project note: [[New]]")
        'Project note: [[New]]\\nnotes'
        >>> apply_marker("", "Project note: [[New]]")
        'Project note: [[New]]\\n'
    """
    lines = (description or "").split("\n")
    if lines[0].startswith(MARKER_PREFIX):
        lines[0] = marker
    else:
        lines.insert(0, marker)
    return "\n".join(lines)


class TaskLinker:
    """Writes project-note markers into Todoist task descriptions.

    Example:
        >>> linker = TaskLinker(api)
        >>> linker.link(context)
        >>> print(f"Linked {context.report.linked_tasks} task(s)")
    """

    def __init__(self, api: APIWrapper, dry_run: bool = False):
        """Initialize the linker.

        Args:
            api: Todoist client used to list and update tasks
            dry_run: Count the tasks that would be linked without updating them
        """
        self._api = api
        self.dry_run = dry_run

    def link(self, context: SyncContext) -> None:
        """Link every task whose project has exactly one note.

        A failure fetching the task listing aborts linking with a single
        reported error. A failure updating one task is reported for that task
        and the remaining tasks are still processed.

        Args:
            context: Reconciled state of the current pass
        """
        report = context.report

        try:
            logger.info("Todoist API: listing tasks")
            raw_tasks = self._api.list_tasks()
        except SyncError as e:
            message = (
                "Error fetching tasks from Todoist. "
                f"Please check your API key and try again. ({e})"
            )
            logger.error(message)
            report.errors.append(message)
            return

        skipped = 0
        for raw in raw_tasks:
            task = self._create_task_record(raw)
            if task is None:
                skipped += 1
                continue

            paths = context.index.paths_for(task.project_id)
            if len(paths) != 1:
                # No note, or ambiguous
                skipped += 1
                continue

            description = apply_marker(task.description, build_marker(paths[0]))
            if self.dry_run:
                logger.info(f"[DRYRUN] Would update task '{task.content}' ({task.task_id})")
                report.linked_tasks += 1
                continue

            try:
                self._api.update_task(task.task_id, description)
            except SyncError as e:
                message = f"Error updating task '{task.content}'."
                logger.error(f"{message} ({e})")
                report.link_errors.append(message)
                continue
            report.linked_tasks += 1

        logger.info(
            f"Linked {report.linked_tasks} task(s), skipped {skipped}, "
            f"{len(report.link_errors)} failed"
        )

    @staticmethod
    def _create_task_record(task_data: Dict[str, Any]) -> Optional[TaskRecord]:
        task_id = task_data.get('id')
        project_id = task_data.get('project_id', task_data.get('projectId'))
        if not task_id or not project_id:
            logger.debug(f"Skipping task without id or project: {task_data}")
            return None
        return TaskRecord(
            task_id=str(task_id),
            project_id=str(project_id),
            content=str(task_data.get('content') or ''),
            description=str(task_data.get('description') or ''),
        )

