# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing the GitHub scope of a scale up decision."""

from typing import TypeAlias

from pydantic import BaseModel


class GitHubRepo(BaseModel):
    """Represent GitHub repository.

    Attributes:
        owner: Owner of the GitHub repository.
        repo: Name of the GitHub repository.
    """

    owner: str
    repo: str

    def path(self) -> str:
        """Return a string representing the path.

        Returns:
            Path to the GitHub entity.
        """
        return f"{self.owner}/{self.repo}"


class GitHubOrg(BaseModel):
    """Represent GitHub organization.

    Attributes:
        org: Name of the GitHub organization.
        group: Runner group to spawn the runners in.
    """

    org: str
    group: str | None = None

    def path(self) -> str:
        """Return a string representing the path.

        Returns:
            Path to the GitHub entity.
        """
        return self.org


GitHubPath: TypeAlias = GitHubOrg | GitHubRepo


def build_scope(
    owner: str, repo: str, organization_level: bool, runner_group: str | None = None
) -> GitHubPath:
    """Build the scope the runners are registered to.

    Args:
        owner: Owner of the repository the event comes from.
        repo: Name of the repository the event comes from.
        organization_level: Whether runners are registered for the whole organization.
        runner_group: Runner group name for GitHub organization. If the scope is
            a repository this argument is ignored.

    Returns:
        The organization of the owner, or the repository.
    """
    if organization_level:
        return GitHubOrg(org=owner, group=runner_group)
    return GitHubRepo(owner=owner, repo=repo)
