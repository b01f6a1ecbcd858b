# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Package for deciding when to scale up GitHub self-hosted runners."""
