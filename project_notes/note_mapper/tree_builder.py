"""Tree builder for the Todoist project hierarchy.

Todoist returns every project of the account in one flat listing, each with
an optional parent_id. This module turns that listing into a ProjectTree in a
single pass, without assuming parents arrive before their children.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from project_notes.todoist_client.api_wrapper import APIWrapper
from .models import ProjectNode, ProjectTree

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds the project forest from the remote listing.

    Example:
        >>> builder = TreeBuilder(api)
        >>> tree = builder.build_tree()
        >>> print(f"{len(tree.roots)} root project(s)")
    """

    def __init__(self, api: Optional[APIWrapper] = None):
        """Initialize the tree builder.

        Args:
            api: APIWrapper used by build_tree() to fetch projects
        """
        self._api = api

    def build_tree(self) -> ProjectTree:
        """Fetch all projects and build the tree.

        Returns:
            ProjectTree: A fresh tree; nothing from earlier passes is reused

        Raises:
            InvalidCredentialsError: If the API token is rejected
            APIUnreachableError: If the API is unreachable
            APIAccessError: If API access fails after retries
        """
        if self._api is None:
            raise ValueError("TreeBuilder needs an APIWrapper to fetch projects")

        logger.info("Todoist API: listing projects")
        raw_projects = self._api.list_projects()
        nodes = [self._create_project_node(p) for p in raw_projects]
        return self.build_from_nodes(nodes)

    @staticmethod
    def build_from_nodes(nodes: Iterable[ProjectNode]) -> ProjectTree:
        """Arrange projects into a tree in one pass over the listing.

        A project is linked under its parent ID even when that parent has not
        been seen yet. Projects whose parent never shows up stay registered in
        ``nodes_by_id`` but are unreachable from ``roots``.

        Args:
            nodes: Projects in listing order

        Returns:
            ProjectTree with children and roots in arrival order
        """
        tree = ProjectTree()
        for node in nodes:
            tree.nodes_by_id[node.project_id] = node
            if node.parent_id:
                tree.children_of.setdefault(node.parent_id, []).append(node.project_id)
            else:
                tree.roots.append(node.project_id)

        orphaned = tree.orphaned_ids()
        for project_id in orphaned:
            node = tree.nodes_by_id[project_id]
            logger.warning(
                f"Project '{node.name}' ({project_id}) is not reachable from any "
                f"root project (parent {node.parent_id} missing) - skipping"
            )

        logger.debug(
            f"Built project tree: {len(tree.nodes_by_id)} project(s), "
            f"{len(tree.roots)} root(s), {len(orphaned)} orphaned"
        )
        return tree

    @staticmethod
    def _create_project_node(project_data: Dict[str, Any]) -> ProjectNode:
        """Create a ProjectNode from a raw API project.

        Accepts both snake_case (REST) and camelCase keys.

        Raises:
            ValueError: If the project has no ID
        """
        project_id = project_data.get('id')
        if project_id is None or str(project_id) == '':
            logger.error(f"Project data missing 'id' field: {project_data}")
            raise ValueError("Project data missing required 'id' field")

        parent_id = project_data.get('parent_id', project_data.get('parentId'))
        return ProjectNode(
            project_id=str(project_id),
            name=str(project_data.get('name', '')),
            parent_id=str(parent_id) if parent_id not in (None, '') else None,
        )
