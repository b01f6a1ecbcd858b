# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""GitHub API client."""
import functools
import logging
from typing import Callable, ParamSpec, TypeVar
from urllib.error import HTTPError, URLError

from ghapi.all import GhApi, pages
from typing_extensions import assert_never

from github_runner_scaler.configuration.github import GitHubOrg, GitHubPath, GitHubRepo
from github_runner_scaler.errors import PlatformApiError, TokenError
from github_runner_scaler.types_.github import (
    CheckRunStatus,
    RegistrationToken,
    SelfHostedRunner,
)

logger = logging.getLogger(__name__)

# Parameters of the decorated function
ParamT = ParamSpec("ParamT")
# Return type of the decorated function
ReturnT = TypeVar("ReturnT")


def catch_http_errors(func: Callable[ParamT, ReturnT]) -> Callable[ParamT, ReturnT]:
    """Catch HTTP errors and raise custom exceptions.

    Args:
        func: The target function to catch common errors for.

    Returns:
        The decorated function.
    """

    @functools.wraps(func)
    def wrapper(*args: ParamT.args, **kwargs: ParamT.kwargs) -> ReturnT:
        """Catch common errors when using the GitHub API.

        Args:
            args: Placeholder for positional arguments.
            kwargs: Placeholder for keyword arguments.

        Raises:
            TokenError: If there was an error with the provided token.
            PlatformApiError: If there was an unexpected error using the GitHub API.

        Returns:
            The decorated function.
        """
        try:
            return func(*args, **kwargs)
        except HTTPError as exc:
            if exc.code in (401, 403):
                if exc.code == 401:
                    msg = "Invalid token."
                else:
                    msg = "Provided token has not enough permissions or has reached rate-limit."
                raise TokenError(msg) from exc
            raise PlatformApiError(f"GitHub API returned {exc.code} in {func.__name__}") from exc
        except URLError as exc:
            raise PlatformApiError(f"Unable to reach GitHub API in {func.__name__}") from exc

    return wrapper


class GithubClient:
    """GitHub API client."""

    def __init__(self, token: str, api_url: str | None = None, app_jwt: bool = False):
        """Instantiate the GiHub API client.

        Args:
            token: Installation token, or the GitHub App JWT if app_jwt is set.
            api_url: URL of the GitHub API. Defaults to the github.com API.
            app_jwt: Whether the token authenticates as the GitHub App itself.
        """
        if app_jwt:
            self._client = GhApi(jwt_token=token, gh_host=api_url)
        else:
            self._client = GhApi(token=token, gh_host=api_url)

    @catch_http_errors
    def get_org_installation_id(self, org: str) -> int:
        """Get the GitHub App installation id of an organization.

        Requires a client authenticated as the GitHub App.

        Args:
            org: Name of the organization.

        Returns:
            The installation id.
        """
        return int(self._client.apps.get_org_installation(org=org)["id"])

    @catch_http_errors
    def get_repo_installation_id(self, owner: str, repo: str) -> int:
        """Get the GitHub App installation id of a repository.

        Requires a client authenticated as the GitHub App.

        Args:
            owner: Owner of the repository.
            repo: Name of the repository.

        Returns:
            The installation id.
        """
        return int(self._client.apps.get_repo_installation(owner=owner, repo=repo)["id"])

    @catch_http_errors
    def get_check_run_status(self, owner: str, repo: str, check_run_id: int) -> CheckRunStatus:
        """Get the status of a check run.

        Args:
            owner: Owner of the repository.
            repo: Name of the repository.
            check_run_id: Id of the check run.

        Returns:
            The status of the check run.
        """
        check_run = self._client.checks.get(owner=owner, repo=repo, check_run_id=check_run_id)
        return CheckRunStatus(check_run["status"])

    @catch_http_errors
    def list_runners(self, path: GitHubPath) -> list[SelfHostedRunner]:
        """Get all runners information on GitHub under a repo or org.

        Args:
            path: GitHub repository path in the format '<owner>/<repo>', or the GitHub organization
                name.

        Returns:
            List of runner information.
        """
        remote_runners_list: list[dict] = []

        if isinstance(path, GitHubRepo):
            # The documentation of ghapi for pagination is incorrect and examples will give errors.
            self._client.actions.list_self_hosted_runners_for_repo(
                owner=path.owner, repo=path.repo, per_page=100
            )
            num_of_pages = self._client.last_page()
            remote_runners_list = [
                item
                for page in pages(
                    self._client.actions.list_self_hosted_runners_for_repo,
                    num_of_pages + 1,
                    owner=path.owner,
                    repo=path.repo,
                    per_page=100,
                )
                for item in page["runners"]
            ]
        elif isinstance(path, GitHubOrg):
            self._client.actions.list_self_hosted_runners_for_org(org=path.org, per_page=100)
            num_of_pages = self._client.last_page()
            remote_runners_list = [
                item
                for page in pages(
                    self._client.actions.list_self_hosted_runners_for_org,
                    num_of_pages + 1,
                    org=path.org,
                    per_page=100,
                )
                for item in page["runners"]
            ]
        else:
            assert_never(path)

        return [SelfHostedRunner.build_from_github(runner) for runner in remote_runners_list]

    @catch_http_errors
    def get_runner_registration_token(self, path: GitHubPath) -> str:
        """Get token from GitHub used for registering runners.

        Args:
            path: GitHub repository path in the format '<owner>/<repo>', or the GitHub organization
                name.

        Returns:
            The registration token.
        """
        token: RegistrationToken
        if isinstance(path, GitHubRepo):
            token = RegistrationToken.model_validate(
                dict(
                    self._client.actions.create_registration_token_for_repo(
                        owner=path.owner, repo=path.repo
                    )
                )
            )
        elif isinstance(path, GitHubOrg):
            token = RegistrationToken.model_validate(
                dict(self._client.actions.create_registration_token_for_org(org=path.org))
            )
        else:
            assert_never(path)

        return token.token
