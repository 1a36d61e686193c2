"""Access guard: namespace authorization ahead of any query work."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from workload_metrics import AccessDeniedError

if TYPE_CHECKING:
    from mesh_console.protocols import NamespaceAccessChecker

logger = logging.getLogger("mesh_console.access")


async def ensure_namespace_access(checker: NamespaceAccessChecker, namespace: str) -> None:
    """Ask the cluster directory once whether ``namespace`` may be read.

    Raises:
        AccessDeniedError: when the directory denies access. The cause is
            logged here; callers should not echo it back to the client.
    """
    decision = await checker.check_namespace_access(namespace)
    if not decision.allowed:
        logger.warning("Access to namespace %s denied: %s", namespace, decision.reason)
        raise AccessDeniedError(namespace, decision.reason)
