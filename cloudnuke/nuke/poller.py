"""Confirmation polling for asynchronous deletes.

Some provider delete calls return before the resource is actually gone. The
poller probes on an interval, with a bounded number of attempts, until the
resource is observed gone, enters a terminal failure state, or the bound is hit.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..models.resource import ProbeFunc, ProbeStatus
from .errors import ConfirmationFailedError, ConfirmationTimeoutError, is_already_gone

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_SECONDS = 10.0


class ConfirmationPoller:
    """Waits until a deleted resource is observably gone.

    Attributes:
        max_attempts: Number of probe calls before giving up
        interval: Seconds between probes
        backoff: Multiplier applied to the interval after each attempt (1.0 = fixed)
        max_interval: Upper bound for the interval when backing off
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        backoff: float = 1.0,
        max_interval: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")
        self.max_attempts = max_attempts
        self.interval = interval
        self.backoff = backoff
        self.max_interval = max_interval
        self._sleep = sleep

    def wait_until_gone(
        self,
        region: str,
        identifier: str,
        probe: ProbeFunc,
        resource_type: Optional[str] = None,
    ) -> None:
        """Poll `probe` until the resource is gone.

        Args:
            region: Region of the resource
            identifier: Resource identifier
            probe: Callable returning the resource's ProbeStatus
            resource_type: Resource type name (for errors and logging)

        Raises:
            ConfirmationFailedError: If the probe reports a terminal failure
            ConfirmationTimeoutError: If the resource is still present after max_attempts
        """
        interval = self.interval
        for attempt in range(1, self.max_attempts + 1):
            status = self._probe(probe, region, identifier)

            if status == ProbeStatus.GONE:
                logger.debug(f"{identifier} confirmed deleted after {attempt} attempt(s)")
                return
            if status == ProbeStatus.FAILED:
                raise ConfirmationFailedError(identifier, resource_type=resource_type)

            if attempt < self.max_attempts:
                logger.debug(
                    f"{identifier} still present, probing again in {interval}s "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                self._sleep(interval)
                interval = interval * self.backoff
                if self.max_interval is not None:
                    interval = min(interval, self.max_interval)

        raise ConfirmationTimeoutError(identifier, self.max_attempts, resource_type=resource_type)

    def _probe(self, probe: ProbeFunc, region: str, identifier: str) -> ProbeStatus:
        try:
            return probe(region, identifier)
        except Exception as e:
            if is_already_gone(e):
                return ProbeStatus.GONE
            logger.debug(f"Probe for {identifier} failed, treating as pending: {e}")
            return ProbeStatus.PENDING
