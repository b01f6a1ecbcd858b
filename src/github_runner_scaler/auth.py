# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Authentication against GitHub as a GitHub App."""

import abc
import logging
import time
from urllib.error import HTTPError, URLError

import jwt
from ghapi.all import GhApi

from github_runner_scaler.configuration.base import GitHubAppConfiguration
from github_runner_scaler.errors import AuthenticationError

logger = logging.getLogger(__name__)

# GitHub rejects app tokens valid for more than 10 minutes.
APP_JWT_EXPIRATION_SECONDS = 10 * 60
# Allow for clock drift between this host and GitHub.
APP_JWT_CLOCK_DRIFT_SECONDS = 60


class GitHubAuth(abc.ABC):
    """Base class for obtaining GitHub credentials."""

    @abc.abstractmethod
    def get_app_token(self) -> str:
        """Get a token authenticating as the GitHub App itself."""

    @abc.abstractmethod
    def get_installation_token(self, installation_id: int) -> str:
        """Get a token for an installation of the GitHub App.

        Args:
            installation_id: The installation to authenticate for.
        """


class GitHubAppAuth(GitHubAuth):
    """Obtain GitHub credentials with the private key of a GitHub App."""

    def __init__(self, app_config: GitHubAppConfiguration, api_url: str | None = None):
        """Construct the object.

        Args:
            app_config: Credentials of the GitHub App.
            api_url: URL of the GitHub API. Defaults to the github.com API.
        """
        self._app_config = app_config
        self._api_url = api_url

    def get_app_token(self) -> str:
        """Sign a JWT for the GitHub App.

        Raises:
            AuthenticationError: If the private key cannot sign the token.

        Returns:
            The signed JWT.
        """
        now = int(time.time())
        payload = {
            "iat": now - APP_JWT_CLOCK_DRIFT_SECONDS,
            "exp": now + APP_JWT_EXPIRATION_SECONDS - APP_JWT_CLOCK_DRIFT_SECONDS,
            "iss": str(self._app_config.app_id),
        }
        try:
            return jwt.encode(payload, self._app_config.private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            raise AuthenticationError(
                f"Unable to sign token for GitHub App {self._app_config.app_id}"
            ) from exc

    def get_installation_token(self, installation_id: int) -> str:
        """Exchange the GitHub App JWT for an installation access token.

        Args:
            installation_id: The installation to authenticate for.

        Raises:
            AuthenticationError: If GitHub refuses to issue the token.

        Returns:
            The installation access token.
        """
        client = GhApi(jwt_token=self.get_app_token(), gh_host=self._api_url)
        try:
            response = client.apps.create_installation_access_token(
                installation_id=installation_id
            )
        except (HTTPError, URLError) as exc:
            raise AuthenticationError(
                f"Unable to get access token for installation {installation_id}"
            ) from exc
        logger.debug("Obtained access token for installation %s", installation_id)
        return response["token"]
