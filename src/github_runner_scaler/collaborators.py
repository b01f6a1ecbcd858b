# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Interfaces of the services the scaler relies on for runner instances."""

import abc

from github_runner_scaler.configuration import GitHubPath
from github_runner_scaler.models import CreateRunnerRequest, RunnerRecord


class RunnerInventory(abc.ABC):
    """Base class for the store of the runners created by the scaler."""

    @abc.abstractmethod
    def list_runners(self, environment: str, scope: GitHubPath) -> list[RunnerRecord]:
        """List the runners tracked for an environment and a scope.

        Args:
            environment: Deployment environment of the runners.
            scope: Only list runners registered to this organization or repository.
        """


class RunnerProvisioner(abc.ABC):
    """Base class for the service creating runner instances."""

    @abc.abstractmethod
    def create_runner(self, request: CreateRunnerRequest) -> None:
        """Create one runner instance.

        Implementations raise ProvisioningError if the runner cannot be created.

        Args:
            request: Description of the runner to create.
        """
