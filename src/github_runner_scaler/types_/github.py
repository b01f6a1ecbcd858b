# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing GitHub API related types."""


from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class GitHubRunnerStatus(str, Enum):
    """Status of runner on GitHub.

    Attributes:
        ONLINE: Represents an online runner status.
        OFFLINE: Represents an offline runner status.
    """

    ONLINE = "online"
    OFFLINE = "offline"


class CheckRunStatus(str, Enum):
    """Status of a check run on GitHub.

    Attributes:
        QUEUED: Represents a check run that is queued.
        IN_PROGRESS: Represents a check run that is in progress.
        COMPLETED: Represents a check run that is completed.
        WAITING: Represents a check run that is waiting.
        REQUESTED: Represents a check run that is requested.
        PENDING: Represents a check run that is pending.
    """

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"


class SelfHostedRunnerLabel(BaseModel):
    """A single label of self-hosted runners.

    Attributes:
        name: Name of the label.
    """

    name: str


class SelfHostedRunner(BaseModel):
    """Information on a single self-hosted runner.

    Attributes:
        busy: Whether the runner is executing a job.
        id: Unique identifier of the runner.
        name: Name of the runner.
        os: Operating system of the runner.
        labels: Labels of the runner.
        status: The Github runner status.
    """

    busy: bool
    id: int
    name: str
    os: str = ""
    labels: list[SelfHostedRunnerLabel]
    status: GitHubRunnerStatus

    @classmethod
    def build_from_github(cls, github_dict: dict) -> "SelfHostedRunner":
        """Build a SelfHostedRunner from the GitHub runner information.

        Args:
            github_dict: GitHub dictionary from the list_runners endpoint.

        Returns:
            A SelfHostedRunner from the input data.
        """
        # Pydantic does not correctly parse labels, they are of type fastcore.foundation.L.
        github_dict = dict(github_dict)
        github_dict["labels"] = [dict(label) for label in github_dict["labels"]]
        return cls.model_validate(github_dict)

    def has_label(self, label: str) -> bool:
        """Check whether the runner carries a label.

        Args:
            label: Name of the label.

        Returns:
            True if the runner has the label.
        """
        return any(runner_label.name == label for runner_label in self.labels)


class RegistrationToken(BaseModel):
    """Token used for registering GitHub runners.

    Attributes:
        token: Token for registering GitHub runners.
        expires_at: Time the token expires at.
    """

    token: str
    expires_at: str
