"""Teardown protocol execution.

Runs a resource type's ordered pre-delete steps (detach, drain, disassociate)
for one identifier. The first failing step aborts the rest and the final delete
call is never attempted.
"""

from __future__ import annotations

import logging

from ..models.resource import ResourceType
from .errors import TeardownStepError, is_already_gone

logger = logging.getLogger(__name__)


class TeardownExecutor:
    """Executes teardown steps strictly in declared order."""

    def run(self, resource_type: ResourceType, region: str, identifier: str) -> None:
        """Run every teardown step for one identifier.

        Resource types without teardown steps pass straight through.

        Raises:
            TeardownStepError: On the first failing step
        """
        steps = resource_type.teardown_steps()
        for number, step in enumerate(steps, start=1):
            logger.debug(f"{resource_type.name} {identifier}: teardown step {number}/{len(steps)} ({step.name})")
            try:
                step(region, identifier)
            except Exception as e:
                if is_already_gone(e):
                    logger.info(f"{resource_type.name} {identifier} disappeared during step {number}")
                else:
                    logger.error(f"[Failed] {resource_type.name} {identifier} step {number}: {e}")
                raise TeardownStepError(resource_type.name, step.name, number, e) from e
