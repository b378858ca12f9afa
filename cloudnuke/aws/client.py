"""Boto3 client factory and region discovery."""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig

logger = logging.getLogger(__name__)

# Region used for account-level (global) services and region discovery
DEFAULT_REGION = "us-east-1"

_RETRY_CONFIG = BotoConfig(retries={"max_attempts": 10, "mode": "standard"})


def create_boto_client(service_name: str, region_name: Optional[str] = None, profile_name: Optional[str] = None) -> Any:
    """Create a boto3 client for a service.

    A fresh session is created per call; boto3 sessions are not safe to share
    across threads.

    Args:
        service_name: AWS service name (e.g., 'ec2', 'iam')
        region_name: AWS region (defaults to us-east-1)
        profile_name: AWS profile name (optional)

    Returns:
        Boto3 client
    """
    session = boto3.Session(profile_name=profile_name) if profile_name else boto3.Session()
    return session.client(service_name, region_name=region_name or DEFAULT_REGION, config=_RETRY_CONFIG)


def get_enabled_regions(profile_name: Optional[str] = None) -> list[str]:
    """List regions enabled for the account.

    Args:
        profile_name: AWS profile name (optional)

    Returns:
        Sorted region names, excluding opt-in regions that are not enabled
    """
    client = create_boto_client("ec2", region_name=DEFAULT_REGION, profile_name=profile_name)
    response = client.describe_regions(AllRegions=False)
    regions = sorted(
        region["RegionName"]
        for region in response.get("Regions", [])
        if region.get("OptInStatus", "opt-in-not-required") != "not-opted-in"
    )
    logger.debug(f"Enabled regions: {', '.join(regions)}")
    return regions
