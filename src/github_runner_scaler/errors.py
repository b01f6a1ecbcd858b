# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Errors used by the runner scaler."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from github_runner_scaler.models import ScaleUpResult


class UnsupportedTransportError(Exception):
    """Represents an event delivered by a transport the scaler does not handle."""


class AuthenticationError(Exception):
    """Represents an error when obtaining GitHub credentials."""


class PlatformClientError(Exception):
    """Base class for all github client errors."""


class PlatformApiError(PlatformClientError):
    """Represents an error when the GitHub API returns an error."""


class TokenError(PlatformClientError):
    """Represents an error when the token is invalid or has not enough permissions."""


class ProvisioningError(Exception):
    """Represents an error when the provisioner fails to create a runner."""


class ScaleUpError(Exception):
    """Represents failures while provisioning runners for some runner types.

    Attributes:
        failures: The error raised for each runner type that failed.
        result: The outcome of the runner types evaluated, including the ones created.
    """

    def __init__(self, failures: dict[str, Exception], result: ScaleUpResult | None = None):
        """Construct the error.

        Args:
            failures: The error raised for each runner type that failed.
            result: The outcome of the runner types evaluated, including the ones created.
        """
        super().__init__(f"Failed to scale up runner types: {', '.join(sorted(failures))}")
        self.failures = failures
        self.result = result
