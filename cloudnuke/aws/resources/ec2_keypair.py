"""EC2 key pair resource type."""

from __future__ import annotations

from ...models.filter_config import FilterConfig
from ...models.resource import Candidate
from .base import AwsResourceType, tags_to_dict


class Ec2KeyPairs(AwsResourceType):
    """EC2 key pairs; deleted synchronously, created time from CreateTime."""

    @property
    def name(self) -> str:
        return "ec2-keypairs"

    @property
    def service_name(self) -> str:
        return "ec2"

    def list(self, region: str, filters: FilterConfig) -> list[Candidate]:
        client = self._create_client(region)
        response = client.describe_key_pairs()

        candidates = []
        for key_pair in response.get("KeyPairs", []):
            candidates.append(
                Candidate(
                    identifier=key_pair["KeyPairId"],
                    name=key_pair.get("KeyName"),
                    created_at=key_pair.get("CreateTime"),
                    tags=tags_to_dict(key_pair.get("Tags")),
                )
            )

        self.logger.debug(f"Listed {len(candidates)} key pairs in {region}")
        return candidates

    def delete(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        client.delete_key_pair(KeyPairId=identifier)
