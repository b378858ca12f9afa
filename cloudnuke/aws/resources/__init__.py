"""Bundled AWS resource types."""

from typing import Optional

from ...nuke.registry import ResourceRegistry
from .ec2_eip import Ec2ElasticIps, Ec2TagStore
from .ec2_keypair import Ec2KeyPairs
from .ecs_service import EcsServices
from .iam_role import IamRoles

__all__ = ["Ec2ElasticIps", "Ec2KeyPairs", "Ec2TagStore", "EcsServices", "IamRoles", "default_registry"]


def default_registry(aws_profile: Optional[str] = None) -> ResourceRegistry:
    """Build the registry of every bundled AWS resource type."""
    return ResourceRegistry(
        [
            Ec2KeyPairs(aws_profile),
            Ec2ElasticIps(aws_profile),
            EcsServices(aws_profile),
            IamRoles(aws_profile),
        ]
    )
