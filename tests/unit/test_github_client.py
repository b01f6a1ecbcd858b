# Copyright 2026 Canonical Ltd.
#  See LICENSE file for licensing details.
import http
from unittest.mock import MagicMock
from urllib.error import HTTPError, URLError

import pytest

import github_runner_scaler.github_client
from github_runner_scaler.configuration.github import GitHubOrg, GitHubRepo
from github_runner_scaler.errors import PlatformApiError, TokenError
from github_runner_scaler.github_client import GithubClient
from github_runner_scaler.types_.github import (
    CheckRunStatus,
    GitHubRunnerStatus,
    SelfHostedRunner,
    SelfHostedRunnerLabel,
)


@pytest.fixture(name="github_client")
def github_client_fixture() -> GithubClient:
    """Create a GithubClient object with a mocked GhApi object."""
    gh_client = GithubClient("token")
    gh_client._client = MagicMock()
    return gh_client


def _raw_runner(runner_id: int, busy: bool, labels: list[str]) -> dict:
    """Build a runner as returned by the GitHub API."""
    return {
        "id": runner_id,
        "name": f"runner-{runner_id}",
        "os": "linux",
        "status": "online",
        "busy": busy,
        "labels": [{"id": i, "name": label, "type": "custom"} for i, label in enumerate(labels)],
    }


@pytest.mark.parametrize(
    "path, list_method, expected_kwargs",
    [
        pytest.param(
            GitHubRepo(owner="acme", repo="widgets"),
            "list_self_hosted_runners_for_repo",
            {"owner": "acme", "repo": "widgets", "per_page": 100},
            id="repository",
        ),
        pytest.param(
            GitHubOrg(org="acme"),
            "list_self_hosted_runners_for_org",
            {"org": "acme", "per_page": 100},
            id="organization",
        ),
    ],
)
def test_list_runners(
    github_client: GithubClient,
    monkeypatch: pytest.MonkeyPatch,
    path,
    list_method: str,
    expected_kwargs: dict,
):
    """
    arrange: A mocked Github Client that returns two pages of runners.
    act: Call list_runners.
    assert: The runners of all pages are returned.
    """
    github_client._client.last_page.return_value = 1
    pages = MagicMock()
    pages.return_value = [
        {"runners": [_raw_runner(1, True, ["linux.2xlarge"])]},
        {"runners": [_raw_runner(2, False, ["self-hosted", "win.2xlarge"])]},
    ]
    monkeypatch.setattr(github_runner_scaler.github_client, "pages", pages)

    runners = github_client.list_runners(path)

    list_func = getattr(github_client._client.actions, list_method)
    list_func.assert_called_once_with(**expected_kwargs)
    pages.assert_called_once_with(list_func, 2, **expected_kwargs)
    assert runners == [
        SelfHostedRunner(
            id=1,
            name="runner-1",
            os="linux",
            status=GitHubRunnerStatus.ONLINE,
            busy=True,
            labels=[SelfHostedRunnerLabel(name="linux.2xlarge")],
        ),
        SelfHostedRunner(
            id=2,
            name="runner-2",
            os="linux",
            status=GitHubRunnerStatus.ONLINE,
            busy=False,
            labels=[
                SelfHostedRunnerLabel(name="self-hosted"),
                SelfHostedRunnerLabel(name="win.2xlarge"),
            ],
        ),
    ]


def test_get_check_run_status(github_client: GithubClient):
    """
    arrange: A mocked Github Client returning a queued check run.
    act: Call get_check_run_status.
    assert: The queued status is returned.
    """
    github_client._client.checks.get.return_value = {"id": 1234, "status": "queued"}

    status = github_client.get_check_run_status(owner="acme", repo="widgets", check_run_id=1234)

    assert status == CheckRunStatus.QUEUED
    github_client._client.checks.get.assert_called_once_with(
        owner="acme", repo="widgets", check_run_id=1234
    )


def test_get_installation_ids(github_client: GithubClient):
    """
    arrange: A mocked Github Client returning installations.
    act: Get the organization and repository installation ids.
    assert: The ids of the installations are returned.
    """
    github_client._client.apps.get_org_installation.return_value = {"id": 11}
    github_client._client.apps.get_repo_installation.return_value = {"id": 12}

    assert github_client.get_org_installation_id(org="acme") == 11
    assert github_client.get_repo_installation_id(owner="acme", repo="widgets") == 12
    github_client._client.apps.get_org_installation.assert_called_once_with(org="acme")
    github_client._client.apps.get_repo_installation.assert_called_once_with(
        owner="acme", repo="widgets"
    )


def test_get_runner_registration_token_repo(github_client: GithubClient):
    """
    arrange: A mocked Github Client returning a registration token.
    act: Get a registration token for a repository.
    assert: The repository endpoint is used and the token returned.
    """
    github_client._client.actions.create_registration_token_for_repo.return_value = {
        "token": "repo-token",
        "expires_at": "2026-10-18T08:00:00Z",
    }

    token = github_client.get_runner_registration_token(GitHubRepo(owner="acme", repo="widgets"))

    assert token == "repo-token"
    github_client._client.actions.create_registration_token_for_repo.assert_called_once_with(
        owner="acme", repo="widgets"
    )
    github_client._client.actions.create_registration_token_for_org.assert_not_called()


def test_get_runner_registration_token_org(github_client: GithubClient):
    """
    arrange: A mocked Github Client returning a registration token.
    act: Get a registration token for an organization.
    assert: The organization endpoint is used and the token returned.
    """
    github_client._client.actions.create_registration_token_for_org.return_value = {
        "token": "org-token",
        "expires_at": "2026-10-18T08:00:00Z",
    }

    token = github_client.get_runner_registration_token(GitHubOrg(org="acme", group="ci"))

    assert token == "org-token"
    github_client._client.actions.create_registration_token_for_org.assert_called_once_with(
        org="acme"
    )


def test_catch_http_errors(github_client: GithubClient):
    """
    arrange: A mocked Github Client that raises a 500 HTTPError.
    act: Call  an API endpoint.
    assert: A PlatformApiError is raised.
    """
    github_client._client.checks.get.side_effect = HTTPError(
        "http://test.com", 500, "", http.client.HTTPMessage(), None
    )

    with pytest.raises(PlatformApiError):
        github_client.get_check_run_status(owner="acme", repo="widgets", check_run_id=1)


@pytest.mark.parametrize("code", [pytest.param(401, id="401"), pytest.param(403, id="403")])
def test_catch_http_errors_token_issues(github_client: GithubClient, code: int):
    """
    arrange: A mocked Github Client that raises a 401 or 403 HTTPError.
    act: Call an API endpoint.
    assert: A TokenError is raised.
    """
    github_client._client.actions.create_registration_token_for_org.side_effect = HTTPError(
        "http://test.com", code, "", http.client.HTTPMessage(), None
    )

    with pytest.raises(TokenError):
        github_client.get_runner_registration_token(GitHubOrg(org="acme"))


def test_catch_url_errors(github_client: GithubClient):
    """
    arrange: A mocked Github Client unable to reach GitHub.
    act: Call an API endpoint.
    assert: A PlatformApiError is raised.
    """
    github_client._client.apps.get_org_installation.side_effect = URLError("unreachable")

    with pytest.raises(PlatformApiError):
        github_client.get_org_installation_id(org="acme")


@pytest.mark.parametrize(
    "app_jwt, expected_kwargs",
    [
        pytest.param(False, {"token": "secret", "gh_host": None}, id="installation token"),
        pytest.param(True, {"jwt_token": "secret", "gh_host": None}, id="app jwt"),
    ],
)
def test_client_authentication(monkeypatch: pytest.MonkeyPatch, app_jwt: bool, expected_kwargs):
    """
    arrange: A mocked GhApi class.
    act: Build a GithubClient.
    assert: The token is passed as installation token or as app JWT.
    """
    gh_api = MagicMock()
    monkeypatch.setattr(github_runner_scaler.github_client, "GhApi", gh_api)

    GithubClient("secret", app_jwt=app_jwt)

    gh_api.assert_called_once_with(**expected_kwargs)
