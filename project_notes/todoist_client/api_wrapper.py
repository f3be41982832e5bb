"""API wrapper for the Todoist REST API.

This module wraps a requests Session and provides error translation from HTTP
exceptions to our typed exception hierarchy. It integrates with the retry
logic for handling rate limits and follows cursor pagination on list calls.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

from .auth import Authenticator
from .errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    ResourceNotFoundError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

# Seconds before a request is abandoned
REQUEST_TIMEOUT = 30

# Page size requested from paginated endpoints
PAGE_LIMIT = 200

# Guard against a server that keeps returning the same cursor
MAX_PAGES = 500


class APIWrapper:
    """Wrapper around the Todoist REST API with error translation.

    This class provides a thin layer over HTTP that:
    1. Handles authentication using the Authenticator
    2. Translates HTTP errors to typed exceptions
    3. Integrates retry logic for 429 rate limits
    4. Provides a clean interface for the three calls the engine uses

    Example:
        >>> auth = Authenticator(api_token="0123abcd")
        >>> api = APIWrapper(auth)
        >>> projects = api.list_projects()
    """

    def __init__(self, authenticator: Authenticator, session: Optional[requests.Session] = None):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator instance for loading credentials
            session: Optional pre-built requests Session (used by tests)
        """
        self._authenticator = authenticator
        self._session = session

    def _get_session(self) -> requests.Session:
        """Get or create the HTTP session.

        The session is created lazily on first use so that a missing token is
        only reported when the API is actually needed.

        Returns:
            requests.Session with the Authorization header set

        Raises:
            InvalidCredentialsError: If no token is configured
        """
        if self._session is None:
            creds = self._authenticator.get_credentials()
            session = requests.Session()
            session.headers.update({
                'Authorization': f'Bearer {creds.api_token}',
                'Accept': 'application/json',
            })
            self._session = session
        return self._session

    def _base_url(self) -> str:
        return self._authenticator.get_credentials().url

    def _sanitize_credentials(self, text: str) -> str:
        """Mask tokens in error messages before they reach the logs.

        Args:
            text: The error message or log text to sanitize

        Returns:
            str: Sanitized text with credentials masked

        Example:
            >>> api._sanitize_credentials("Authorization: Bearer 0123abcd")
            'Authorization: ***REDACTED***'
        """
        if not text:
            return text

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            text,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'(api_?token|token)["\']?\s*[:=]\s*["\']?([^"\'\s&]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        # Todoist tokens are 40 hex characters
        sanitized = re.sub(r'\b[0-9a-f]{40}\b', '***REDACTED***', sanitized)
        return sanitized

    def _translate_error(self, exception: Exception, operation: str) -> Exception:
        """Translate HTTP exceptions to typed Todoist exceptions.

        Args:
            exception: The original exception from requests
            operation: Description of the operation that failed (for logging)

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, (Timeout, ConnectionError)):
            return APIUnreachableError(endpoint=self._base_url())

        status_code = None
        response = getattr(exception, 'response', None)
        if response is not None:
            status_code = getattr(response, 'status_code', None)

        if status_code in (401, 403):
            return InvalidCredentialsError(
                endpoint=self._base_url(),
                reason=f"HTTP {status_code} during {operation}"
            )

        if status_code == 404:
            match = re.search(r'\(([^)]+)\)', operation)
            resource = match.group(1) if match else operation
            return ResourceNotFoundError(resource=resource)

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(f"Todoist API failure during {operation}")

    def _request(self, method: str, path: str, operation: str, **kwargs) -> Any:
        """Issue one HTTP request with retry and error translation.

        Args:
            method: HTTP method
            path: Path below the API base URL (e.g. "/projects")
            operation: Operation label used in errors and logs
            **kwargs: Passed through to requests

        Returns:
            Decoded JSON body, or None for empty responses
        """
        url = f"{self._base_url()}{path}"

        def _send():
            try:
                response = self._get_session().request(
                    method, url, timeout=REQUEST_TIMEOUT, **kwargs
                )
                response.raise_for_status()
            except HTTPError as e:
                if e.response is not None and e.response.status_code == 429:
                    raise
                raise self._translate_error(e, operation) from e
            except (Timeout, ConnectionError) as e:
                raise self._translate_error(e, operation) from e

            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise APIAccessError(
                    f"Todoist API returned invalid JSON during {operation}"
                ) from e

        logger.debug(f"Todoist API: {method} {path}")
        return retry_on_rate_limit(_send)

    def _list_all(self, path: str, operation: str) -> List[Dict[str, Any]]:
        """Fetch every item from a list endpoint.

        Handles both response shapes: a plain JSON list, and the paginated
        ``{"results": [...], "next_cursor": "..."}`` envelope.

        Args:
            path: Endpoint path
            operation: Operation label used in errors and logs

        Returns:
            List of raw item dictionaries in the order the API returned them
        """
        items: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        for _ in range(MAX_PAGES):
            params: Dict[str, Any] = {'limit': PAGE_LIMIT}
            if cursor:
                params['cursor'] = cursor

            body = self._request('GET', path, operation, params=params)

            if body is None:
                break
            if isinstance(body, list):
                items.extend(body)
                break
            if not isinstance(body, dict):
                raise APIAccessError(
                    f"Unexpected response type {type(body).__name__} during {operation}"
                )

            items.extend(body.get('results', []))
            cursor = body.get('next_cursor')
            if not cursor:
                break
        else:
            logger.warning(f"{operation}: stopped after {MAX_PAGES} pages")

        logger.debug(f"{operation}: received {len(items)} item(s)")
        return items

    def list_projects(self) -> List[Dict[str, Any]]:
        """List every project of the account.

        Returns:
            List of raw project dictionaries (id, name, parent_id, ...)

        Raises:
            InvalidCredentialsError: If the token is rejected
            APIUnreachableError: If the API is unreachable
            APIAccessError: If API access fails after retries
        """
        return self._list_all('/projects', 'list_projects')

    def list_tasks(self) -> List[Dict[str, Any]]:
        """List every active task of the account.

        Returns:
            List of raw task dictionaries (id, project_id, content, description, ...)

        Raises:
            InvalidCredentialsError: If the token is rejected
            APIUnreachableError: If the API is unreachable
            APIAccessError: If API access fails after retries
        """
        return self._list_all('/tasks', 'list_tasks')

    def update_task(self, task_id: str, description: str) -> Optional[Dict[str, Any]]:
        """Replace the description of a task.

        Args:
            task_id: Todoist task ID
            description: New description text

        Returns:
            The updated task as returned by the API (may be None)

        Raises:
            ResourceNotFoundError: If the task does not exist
            InvalidCredentialsError: If the token is rejected
            APIUnreachableError: If the API is unreachable
            APIAccessError: If API access fails after retries
        """
        if not task_id or not str(task_id).strip():
            raise ValueError("task_id cannot be empty")

        return self._request(
            'POST',
            f'/tasks/{task_id}',
            f'update_task({task_id})',
            json={'description': description},
        )
