"""In-memory stand-in for the Todoist API and sample project trees.

FakeTodoistAPI has the same three methods the sync engine calls on
APIWrapper, so passes can run end to end against a temporary vault.
"""

from typing import Any, Dict, List, Optional


class FakeTodoistAPI:
    """Todoist account held in memory.

    Example:
        >>> api = FakeTodoistAPI(SAMPLE_PROJECTS)
        >>> api.rename_project('2', 'Web')
        >>> api.list_projects()[1]['name']
        'Web'
    """

    def __init__(
        self,
        projects: Optional[List[Dict[str, Any]]] = None,
        tasks: Optional[List[Dict[str, Any]]] = None,
    ):
        self.projects = [dict(p) for p in (projects or [])]
        self.tasks = [dict(t) for t in (tasks or [])]
        self.updates: List[tuple] = []
        self.list_projects_error: Optional[Exception] = None

    def list_projects(self) -> List[Dict[str, Any]]:
        if self.list_projects_error is not None:
            raise self.list_projects_error
        return [dict(p) for p in self.projects]

    def list_tasks(self) -> List[Dict[str, Any]]:
        return [dict(t) for t in self.tasks]

    def update_task(self, task_id: str, description: str) -> Dict[str, Any]:
        self.updates.append((task_id, description))
        for t in self.tasks:
            if str(t['id']) == task_id:
                t['description'] = description
                return dict(t)
        return {}

    def rename_project(self, project_id: str, name: str) -> None:
        self._find(project_id)['name'] = name

    def move_project(self, project_id: str, parent_id: Optional[str]) -> None:
        self._find(project_id)['parent_id'] = parent_id

    def delete_project(self, project_id: str) -> None:
        self.projects = [p for p in self.projects if p['id'] != project_id]

    def _find(self, project_id: str) -> Dict[str, Any]:
        for p in self.projects:
            if p['id'] == project_id:
                return p
        raise KeyError(project_id)


# Work
#   Website
#     Launch
#   Ops
# Home
SAMPLE_PROJECTS: List[Dict[str, Any]] = [
    {'id': '1', 'name': 'Work', 'parent_id': None},
    {'id': '2', 'name': 'Website', 'parent_id': '1'},
    {'id': '3', 'name': 'Launch', 'parent_id': '2'},
    {'id': '4', 'name': 'Ops', 'parent_id': '1'},
    {'id': '5', 'name': 'Home', 'parent_id': None},
]

SAMPLE_TASKS: List[Dict[str, Any]] = [
    {'id': 't1', 'project_id': '3', 'content': 'Write press release', 'description': 'draft first'},
    {'id': 't2', 'project_id': '5', 'content': 'Fix the fence', 'description': ''},
]
