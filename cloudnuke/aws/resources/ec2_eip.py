"""Elastic IP allocation resource type.

EC2 exposes no allocation time for addresses, so candidates are aged with the
first-seen tag written through Ec2TagStore.
"""

from __future__ import annotations

from typing import Optional

from ...models.filter_config import FilterConfig
from ...models.resource import Candidate, TeardownStep
from ..client import create_boto_client
from .base import AwsResourceType, tags_to_dict


class Ec2TagStore:
    """First-seen tag store for any taggable EC2 resource."""

    def __init__(self, aws_profile: Optional[str] = None) -> None:
        self.aws_profile = aws_profile

    def write(self, region: str, identifier: str, key: str, value: str) -> None:
        client = create_boto_client("ec2", region_name=region, profile_name=self.aws_profile)
        client.create_tags(Resources=[identifier], Tags=[{"Key": key, "Value": value}])


class Ec2ElasticIps(AwsResourceType):
    """Elastic IP allocations, released after disassociation."""

    @property
    def name(self) -> str:
        return "ec2-eip"

    @property
    def service_name(self) -> str:
        return "ec2"

    def list(self, region: str, filters: FilterConfig) -> list[Candidate]:
        client = self._create_client(region)
        response = client.describe_addresses()

        candidates = []
        for address in response.get("Addresses", []):
            allocation_id = address.get("AllocationId")
            if not allocation_id:
                # EC2-Classic addresses have no allocation id and cannot be tagged
                continue

            tags = tags_to_dict(address.get("Tags"))
            candidates.append(
                Candidate(
                    identifier=allocation_id,
                    name=tags.get("Name") or address.get("PublicIp"),
                    tags=tags,
                )
            )

        self.logger.debug(f"Listed {len(candidates)} Elastic IPs in {region}")
        return candidates

    def teardown_steps(self) -> list[TeardownStep]:
        return [TeardownStep("disassociate-address", self._disassociate)]

    def delete(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        client.release_address(AllocationId=identifier)

    def first_seen_store(self) -> Ec2TagStore:
        return Ec2TagStore(self.aws_profile)

    def _disassociate(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        response = client.describe_addresses(AllocationIds=[identifier])

        for address in response.get("Addresses", []):
            association_id = address.get("AssociationId")
            if association_id:
                self.logger.debug(f"Disassociating {identifier} ({association_id})")
                client.disassociate_address(AssociationId=association_id)
