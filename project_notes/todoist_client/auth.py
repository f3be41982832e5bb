"""Authentication module for loading the Todoist API token.

The token is taken from the configuration when present, otherwise from the
TODOIST_API_TOKEN environment variable. A .env file in the working directory
is loaded with python-dotenv so the token never has to live in config.yaml.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

DEFAULT_API_URL = "https://api.todoist.com/api/v1"


class Credentials(NamedTuple):
    """Todoist API credentials."""
    url: str
    api_token: str


class Authenticator:
    """Resolves and validates Todoist credentials.

    Lookup order for the token:
        1. The ``api_token`` passed in (usually from config.yaml)
        2. The ``TODOIST_API_TOKEN`` environment variable (.env supported)

    Example:
        >>> auth = Authenticator(api_token="0123abcd")
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.url}")
    """

    def __init__(self, api_token: Optional[str] = None, api_url: Optional[str] = None):
        """Initialize the authenticator.

        Args:
            api_token: Explicit API token, takes precedence over the environment
            api_url: Base URL of the Todoist REST API
        """
        load_dotenv()
        self._api_token = api_token or None
        self._api_url = api_url or os.getenv('TODOIST_API_URL') or DEFAULT_API_URL

    def get_credentials(self) -> Credentials:
        """Get Todoist credentials.

        Returns:
            Credentials: A named tuple containing url and api_token

        Raises:
            InvalidCredentialsError: If no token is configured
        """
        token = self._api_token or os.getenv('TODOIST_API_TOKEN')
        if not token or not token.strip():
            raise InvalidCredentialsError(
                endpoint=self._api_url,
                reason="no API token configured (set api_token or TODOIST_API_TOKEN)"
            )
        return Credentials(url=self._api_url.rstrip('/'), api_token=token.strip())
