"""Tests for ConfirmationPoller."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from cloudnuke.models.resource import ProbeStatus
from cloudnuke.nuke.errors import ConfirmationFailedError, ConfirmationTimeoutError
from cloudnuke.nuke.poller import ConfirmationPoller


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "test"}}, "DescribeServices")


class TestConfirmationPoller:
    """Test suite for confirmation polling."""

    def test_returns_when_gone(self) -> None:
        """Test polling stops once the probe reports GONE."""
        probe = Mock(side_effect=[ProbeStatus.PENDING, ProbeStatus.PENDING, ProbeStatus.GONE])
        sleep = Mock()

        ConfirmationPoller(max_attempts=5, interval=2.0, sleep=sleep).wait_until_gone("us-east-1", "svc", probe)

        assert probe.call_count == 3
        assert sleep.call_count == 2

    def test_timeout_after_max_attempts(self) -> None:
        """Test a resource still present after max_attempts raises a timeout."""
        probe = Mock(return_value=ProbeStatus.PENDING)
        sleep = Mock()

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            ConfirmationPoller(max_attempts=3, interval=1.0, sleep=sleep).wait_until_gone(
                "us-east-1", "svc", probe, resource_type="ecs-service"
            )

        assert probe.call_count == 3
        assert sleep.call_count == 2
        assert exc_info.value.attempts == 3
        assert exc_info.value.resource_type == "ecs-service"

    def test_terminal_failure(self) -> None:
        """Test FAILED raises immediately."""
        probe = Mock(return_value=ProbeStatus.FAILED)

        with pytest.raises(ConfirmationFailedError):
            ConfirmationPoller(max_attempts=5, sleep=Mock()).wait_until_gone("us-east-1", "svc", probe)

        assert probe.call_count == 1

    def test_not_found_probe_error_counts_as_gone(self) -> None:
        """Test a probe raising a not-found provider error confirms deletion."""
        probe = Mock(side_effect=_client_error("ServiceNotFoundException"))

        ConfirmationPoller(max_attempts=3, sleep=Mock()).wait_until_gone("us-east-1", "svc", probe)

        assert probe.call_count == 1

    def test_other_probe_errors_count_as_pending(self) -> None:
        """Test transient probe errors consume an attempt and polling continues."""
        probe = Mock(side_effect=[_client_error("Throttling"), ProbeStatus.GONE])

        ConfirmationPoller(max_attempts=3, sleep=Mock()).wait_until_gone("us-east-1", "svc", probe)

        assert probe.call_count == 2

    def test_backoff_grows_interval_up_to_max(self) -> None:
        """Test the interval is multiplied by backoff and capped at max_interval."""
        probe = Mock(return_value=ProbeStatus.PENDING)
        sleep = Mock()
        poller = ConfirmationPoller(max_attempts=4, interval=1.0, backoff=2.0, max_interval=3.0, sleep=sleep)

        with pytest.raises(ConfirmationTimeoutError):
            poller.wait_until_gone("us-east-1", "svc", probe)

        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 3.0]

    def test_invalid_configuration(self) -> None:
        """Test invalid attempt counts and backoff factors are rejected."""
        with pytest.raises(ValueError):
            ConfirmationPoller(max_attempts=0)
        with pytest.raises(ValueError):
            ConfirmationPoller(backoff=0.5)
