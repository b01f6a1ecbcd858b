# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module for deciding whether a queued job needs a new runner."""

import logging
from collections import Counter
from typing import Callable, Iterable

from typing_extensions import assert_never

from github_runner_scaler.auth import GitHubAppAuth, GitHubAuth
from github_runner_scaler.collaborators import RunnerInventory, RunnerProvisioner
from github_runner_scaler.configuration import (
    GitHubAppConfiguration,
    GitHubOrg,
    GitHubPath,
    GitHubRepo,
    RunnerTypesConfiguration,
    ScaleUpConfiguration,
    build_scope,
)
from github_runner_scaler.errors import (
    PlatformClientError,
    ProvisioningError,
    ScaleUpError,
    UnsupportedTransportError,
)
from github_runner_scaler.github_client import GithubClient
from github_runner_scaler.models import (
    ActionRequestMessage,
    CreateRunnerRequest,
    RunnerConfig,
    RunnerType,
    ScaleUpResult,
)
from github_runner_scaler.types_.github import (
    CheckRunStatus,
    GitHubRunnerStatus,
    SelfHostedRunner,
)

logger = logging.getLogger(__name__)

SQS_EVENT_SOURCE = "aws:sqs"

GithubClientFactory = Callable[..., GithubClient]


def all_runners_busy(runners: Iterable[SelfHostedRunner], runner_type: str) -> bool:
    """Check whether no online runner of a runner type is idle.

    Offline runners are ignored. Without any online runner of the runner type there
    is no runner to pick up the job, which counts as all runners being busy.

    Args:
        runners: The runners on GitHub.
        runner_type: Name of the runner type, which is also a runner label.

    Returns:
        True if every online runner with the runner type label is busy.
    """
    matching_runners = [
        runner
        for runner in runners
        if runner.has_label(runner_type) and runner.status != GitHubRunnerStatus.OFFLINE
    ]
    busy_count = sum(1 for runner in matching_runners if runner.busy)
    logger.info(
        "Found %s matching GitHub runners for %s, %s are busy",
        len(matching_runners),
        runner_type,
        busy_count,
    )
    return busy_count == len(matching_runners)


def _scope_names(scope: GitHubPath) -> tuple[str | None, str | None]:
    """Get the organization and repository names of a scope.

    Args:
        scope: The organization or repository.

    Returns:
        The organization name and the repository name, exactly one of them set.
    """
    if isinstance(scope, GitHubOrg):
        return scope.org, None
    if isinstance(scope, GitHubRepo):
        return None, scope.path()
    assert_never(scope)


class ScaleUp:
    """Decide whether a queued job needs new runners and request them."""

    # pylint: disable-next=too-many-arguments,too-many-positional-arguments
    def __init__(
        self,
        config: ScaleUpConfiguration,
        runner_types: RunnerTypesConfiguration,
        auth: GitHubAuth,
        inventory: RunnerInventory,
        provisioner: RunnerProvisioner,
        client_factory: GithubClientFactory = GithubClient,
    ):
        """Construct the object.

        Args:
            config: Configuration for the scale up decisions.
            runner_types: The runner types that can be provisioned.
            auth: Source of the GitHub credentials.
            inventory: Store of the runners created.
            provisioner: Service creating the runner instances.
            client_factory: Builds the GitHub client from a token.
        """
        self._config = config
        self._runner_types = runner_types
        self._auth = auth
        self._inventory = inventory
        self._provisioner = provisioner
        self._client_factory = client_factory

    # pylint: disable-next=too-many-arguments,too-many-positional-arguments
    @classmethod
    def build(
        cls,
        config: ScaleUpConfiguration,
        runner_types: RunnerTypesConfiguration,
        app_config: GitHubAppConfiguration,
        inventory: RunnerInventory,
        provisioner: RunnerProvisioner,
    ) -> "ScaleUp":
        """Create a ScaleUp authenticating as a GitHub App.

        Args:
            config: Configuration for the scale up decisions.
            runner_types: The runner types that can be provisioned.
            app_config: Credentials of the GitHub App.
            inventory: Store of the runners created.
            provisioner: Service creating the runner instances.

        Returns:
            A new ScaleUp.
        """
        return cls(
            config=config,
            runner_types=runner_types,
            auth=GitHubAppAuth(app_config, api_url=config.api_url),
            inventory=inventory,
            provisioner=provisioner,
        )

    def handle(self, event_source: str, message: ActionRequestMessage) -> ScaleUpResult:
        """Scale up the runners for a check run event.

        Args:
            event_source: The transport the event was delivered by.
            message: The event.

        Raises:
            UnsupportedTransportError: If the event was not delivered by SQS.
            ScaleUpError: If the runner creation failed for some runner types. The error
                carries the outcome of the other runner types.

        Returns:
            The outcome for each runner type.
        """
        if event_source != SQS_EVENT_SOURCE:
            raise UnsupportedTransportError(f"Cannot handle non-SQS events from {event_source}")

        scope = build_scope(
            owner=message.repository_owner,
            repo=message.repository_name,
            organization_level=self._config.enable_organization_runners,
            runner_group=self._config.runner_group_name,
        )
        installation_id = message.installation_id
        if installation_id == 0:
            installation_id = self._get_installation_id(scope)

        client = self._client_factory(
            self._auth.get_installation_token(installation_id), self._config.api_url
        )
        status = client.get_check_run_status(
            owner=message.repository_owner,
            repo=message.repository_name,
            check_run_id=message.id,
        )
        result = ScaleUpResult(check_run_status=status)
        if status != CheckRunStatus.QUEUED:
            logger.info("Check run %s is %s, no runner needed", message.id, status.value)
            return result

        records = self._inventory.list_runners(environment=self._config.environment, scope=scope)
        logger.info(
            "%s %s has %s runners",
            "Organization" if isinstance(scope, GitHubOrg) else "Repo",
            scope.path(),
            len(records),
        )

        failures: dict[str, Exception] = {}
        runner_counts = Counter(record.runner_type for record in records)
        for name, runner_type in self._runner_types.runner_types.items():
            try:
                self._scale_runner_type(
                    client=client,
                    scope=scope,
                    runner_type=runner_type,
                    current_count=runner_counts[name],
                    result=result,
                )
            except (PlatformClientError, ProvisioningError) as exc:
                logger.exception("Failed to scale up runner type %s", name)
                failures[name] = exc

        if failures:
            raise ScaleUpError(failures, result=result) from next(iter(failures.values()))
        return result

    def _get_installation_id(self, scope: GitHubPath) -> int:
        """Look up the GitHub App installation for the scope.

        Args:
            scope: The organization or repository.

        Returns:
            The installation id.
        """
        app_client = self._client_factory(
            self._auth.get_app_token(), self._config.api_url, app_jwt=True
        )
        if isinstance(scope, GitHubOrg):
            installation_id = app_client.get_org_installation_id(org=scope.org)
        elif isinstance(scope, GitHubRepo):
            installation_id = app_client.get_repo_installation_id(
                owner=scope.owner, repo=scope.repo
            )
        else:
            assert_never(scope)
        logger.info("Resolved installation %s for %s", installation_id, scope.path())
        return installation_id

    def _scale_runner_type(
        self,
        client: GithubClient,
        scope: GitHubPath,
        runner_type: RunnerType,
        current_count: int,
        result: ScaleUpResult,
    ) -> None:
        """Create a runner of the runner type if needed.

        Args:
            client: GitHub client for the installation.
            scope: The organization or repository.
            runner_type: The runner type.
            current_count: Number of runners of the runner type.
            result: The outcome to record the decision in.
        """
        name = runner_type.runner_type_name
        if current_count >= runner_type.max_available:
            logger.info(
                "No %s runner will be created, maximum number of runners reached (%s/%s)",
                name,
                current_count,
                runner_type.max_available,
            )
            result.at_capacity.append(name)
            return

        if not all_runners_busy(client.list_runners(scope), name):
            logger.info("No %s runner will be created, an idle runner is available", name)
            result.idle_available.append(name)
            return

        self._create_runner(client=client, scope=scope, runner_type=runner_type)
        result.created.append(name)

    def _create_runner(
        self, client: GithubClient, scope: GitHubPath, runner_type: RunnerType
    ) -> None:
        """Request one runner of the runner type.

        Args:
            client: GitHub client for the installation.
            scope: The organization or repository.
            runner_type: The runner type.
        """
        token = client.get_runner_registration_token(scope)
        org_name, repo_name = _scope_names(scope)
        runner_group = scope.group if isinstance(scope, GitHubOrg) else None
        runner_config = RunnerConfig(
            url=f"{self._config.config_base_url}/{scope.path()}",
            token=token,
            labels=[runner_type.runner_type_name, *self._config.runner_extra_labels],
            runner_group=runner_group,
        )
        logger.info(
            "Creating %s runner for %s with labels %s",
            runner_type.runner_type_name,
            scope.path(),
            runner_config.labels,
        )
        self._provisioner.create_runner(
            CreateRunnerRequest(
                environment=self._config.environment,
                runner_config=runner_config,
                runner_type=runner_type,
                org_name=org_name,
                repo_name=repo_name,
            )
        )
