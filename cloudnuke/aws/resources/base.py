"""Base class for AWS resource types."""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any, Iterable, Optional

from ...models.resource import GLOBAL_REGION, ResourceType
from ..client import DEFAULT_REGION, create_boto_client


def tags_to_dict(tags: Optional[Iterable[dict[str, str]]]) -> dict[str, str]:
    """Convert an AWS tag list to a dictionary.

    Handles both the capitalized (Key/Value) and lowercase (key/value) shapes.
    """
    result = {}
    for tag in tags or []:
        key = tag.get("Key", tag.get("key"))
        if key is not None:
            result[key] = tag.get("Value", tag.get("value", ""))
    return result


class AwsResourceType(ResourceType):
    """Resource type backed by a boto3 service client.

    Attributes:
        aws_profile: AWS profile used for every client (optional)
    """

    def __init__(self, aws_profile: Optional[str] = None) -> None:
        self.aws_profile = aws_profile
        self.logger = logging.getLogger(self.__class__.__module__)

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Boto3 service name (e.g., 'ec2', 'iam')."""

    def _create_client(self, region: str, service_name: Optional[str] = None) -> Any:
        region_name = DEFAULT_REGION if region == GLOBAL_REGION else region
        return create_boto_client(
            service_name=service_name or self.service_name,
            region_name=region_name,
            profile_name=self.aws_profile,
        )
