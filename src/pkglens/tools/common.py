"""Helpers shared by the tool groups."""

from __future__ import annotations

from pkglens.core.catalog import Catalog
from pkglens.core.errors import DetectionFailure, ExecutionError
from pkglens.core.logging import get_logger
from pkglens.core.models import Mutation
from pkglens.providers.base import PackageProvider

log = get_logger(__name__)

FLATPAK_UNAVAILABLE = "Flatpak is not available on this system."

_VERBS = {
    Mutation.INSTALL: ("installing", "Installed"),
    Mutation.REMOVE: ("removing", "Removed"),
    Mutation.UPDATE: ("updating", "Updated"),
}


def describe_failure(prefix: str, error: ExecutionError) -> str:
    """Render an ExecutionError as a message for the caller."""
    details = error.context.get("error")
    message = f"{prefix}: {error.message}"
    return f"{message}\n{details}" if details else message


async def run_mutation(
    catalog: Catalog, provider: PackageProvider, action: Mutation, target: str
) -> str:
    """Run an install, remove or update and invalidate the installed cache.

    The cache is invalidated whether or not the command succeeded.
    UnsupportedOperation is left to propagate.
    """
    doing, done = _VERBS[action]
    try:
        output = await provider.mutate(action, target)
    except ExecutionError as e:
        log.error("mutation_failed", backend=provider.name, action=action.value, package=target, error=str(e))
        return describe_failure(f"Error {doing} {target}", e)
    except DetectionFailure as e:
        return e.message
    finally:
        catalog.invalidate()

    result = f"{done} {target} via {provider.name}."
    return f"{result}\n\n{output}" if output else result
