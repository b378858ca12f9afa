"""Batching and bounded-concurrency dispatch of deletion work.

Identifiers are split into consecutive batches no larger than the resource
type's max batch size. Batches run one after another; items inside a batch run
concurrently on a thread pool and every item is joined before the next batch
starts. Each item owns its own outcome slot (its future), collected by the
calling thread.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Sequence, TypeVar

from ..models.nuke_result import DeletionOutcome
from .errors import TooManyResourcesError, describe_error, is_already_gone

logger = logging.getLogger(__name__)

# Default number of concurrent deletions within a batch
DEFAULT_MAX_CONCURRENT = 10

# Most provider APIs rate-limit near 100 requests/second; refuse larger nuke calls
MAX_BATCH_SIZE_LIMIT = 100

T = TypeVar("T")

ItemAction = Callable[[str], None]


def split(items: Sequence[T], size: int) -> list[list[T]]:
    """Partition items into consecutive chunks of at most `size` elements.

    Raises:
        ValueError: If size is not positive
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchController:
    """Runs per-identifier actions in batches with bounded concurrency.

    Attributes:
        max_concurrent: Maximum concurrently running items within a batch
        ceiling: Largest number of identifiers a single nuke call may dispatch
        batch_pause: Seconds to wait between consecutive batches
    """

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        ceiling: int = MAX_BATCH_SIZE_LIMIT,
        batch_pause: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self.ceiling = ceiling
        self.batch_pause = batch_pause
        self._sleep = sleep

    def run_batched(
        self,
        resource_type: str,
        identifiers: Sequence[str],
        max_batch_size: Optional[int],
        action: ItemAction,
    ) -> list[DeletionOutcome]:
        """Run `action` for every identifier, batch by batch.

        Args:
            resource_type: Resource type name (for errors and logging)
            identifiers: Identifiers to process
            max_batch_size: Resource type's batch cap (None = no cap of its own)
            action: Callable invoked once per identifier; raising marks that identifier failed

        Returns:
            One DeletionOutcome per identifier

        Raises:
            TooManyResourcesError: If a single batch would exceed the safety
                ceiling; raised before any action is dispatched
        """
        if not identifiers:
            logger.debug(f"No {resource_type} to nuke")
            return []

        batch_size = max_batch_size or len(identifiers)
        if min(batch_size, len(identifiers)) > self.ceiling:
            logger.error(
                f"Nuking too many {resource_type} at once ({len(identifiers)}): halting to avoid hitting rate limiting"
            )
            raise TooManyResourcesError(resource_type, len(identifiers), self.ceiling)

        batches = split(identifiers, batch_size)
        logger.debug(f"Terminating {len(identifiers)} {resource_type} in {len(batches)} batches")

        outcomes: list[DeletionOutcome] = []
        for index, batch in enumerate(batches):
            outcomes.extend(self.run_batch(resource_type, batch, action))

            if self.batch_pause and index != len(batches) - 1:
                logger.debug(f"Sleeping for {self.batch_pause} seconds before processing next batch...")
                self._sleep(self.batch_pause)

        return outcomes

    def run_batch(self, resource_type: str, batch: Sequence[str], action: ItemAction) -> list[DeletionOutcome]:
        """Dispatch one batch concurrently and join every item.

        Raises:
            TooManyResourcesError: If the batch exceeds the safety ceiling
        """
        if len(batch) > self.ceiling:
            raise TooManyResourcesError(resource_type, len(batch), self.ceiling)

        logger.info(f"Deleting {len(batch)} {resource_type}")

        workers = min(self.max_concurrent, len(batch)) or 1
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"nuke-{resource_type}") as executor:
            futures: list[tuple[str, Future[None]]] = [
                (identifier, executor.submit(action, identifier)) for identifier in batch
            ]

        # Leaving the executor context waits for every future
        outcomes = []
        for identifier, future in futures:
            error = future.exception()
            if error is not None and is_already_gone(error):
                logger.info(f"Resource {identifier} already deleted")
            elif error is not None:
                logger.error(f"[Failed] {resource_type} {identifier}: {describe_error(error)}")
            else:
                logger.debug(f"[OK] Deleted {resource_type}: {identifier}")
            outcomes.append(DeletionOutcome(identifier=identifier, error=error))

        return outcomes
