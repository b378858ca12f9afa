"""IAM role resource type."""

from __future__ import annotations

from ...models.filter_config import FilterConfig
from ...models.resource import Candidate, TeardownStep
from .base import AwsResourceType, tags_to_dict

# Roles managed by AWS itself; deleting them breaks service integrations
PROTECTED_ROLE_PREFIXES = ("AWSServiceRoleFor", "AWSReservedSSO_", "OrganizationAccountAccessRole")
SERVICE_ROLE_PATH = "/aws-service-role/"


class IamRoles(AwsResourceType):
    """IAM roles (global).

    Teardown detaches managed policies, deletes inline policies and removes the
    role from instance profiles before the role itself is deleted.
    """

    max_batch_size = 20
    is_global = True

    @property
    def name(self) -> str:
        return "iam-role"

    @property
    def service_name(self) -> str:
        return "iam"

    def list(self, region: str, filters: FilterConfig) -> list[Candidate]:
        client = self._create_client(region)
        paginator = client.get_paginator("list_roles")

        candidates = []
        for page in paginator.paginate():
            for role in page.get("Roles", []):
                role_name = role["RoleName"]
                if self._is_protected(role):
                    self.logger.debug(f"Skipping AWS-managed role {role_name}")
                    continue

                tags = tags_to_dict(client.list_role_tags(RoleName=role_name).get("Tags"))
                candidates.append(
                    Candidate(
                        identifier=role_name,
                        name=role_name,
                        created_at=role.get("CreateDate"),
                        tags=tags,
                    )
                )

        self.logger.debug(f"Listed {len(candidates)} IAM roles")
        return candidates

    def teardown_steps(self) -> list[TeardownStep]:
        return [
            TeardownStep("detach-managed-policies", self._detach_managed_policies),
            TeardownStep("delete-inline-policies", self._delete_inline_policies),
            TeardownStep("remove-from-instance-profiles", self._remove_from_instance_profiles),
        ]

    def delete(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        client.delete_role(RoleName=identifier)

    def _is_protected(self, role: dict) -> bool:
        if role.get("Path", "").startswith(SERVICE_ROLE_PATH):
            return True
        return role["RoleName"].startswith(PROTECTED_ROLE_PREFIXES)

    def _detach_managed_policies(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        paginator = client.get_paginator("list_attached_role_policies")
        for page in paginator.paginate(RoleName=identifier):
            for policy in page.get("AttachedPolicies", []):
                client.detach_role_policy(RoleName=identifier, PolicyArn=policy["PolicyArn"])
                self.logger.debug(f"Detached policy {policy['PolicyArn']} from {identifier}")

    def _delete_inline_policies(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        paginator = client.get_paginator("list_role_policies")
        for page in paginator.paginate(RoleName=identifier):
            for policy_name in page.get("PolicyNames", []):
                client.delete_role_policy(RoleName=identifier, PolicyName=policy_name)
                self.logger.debug(f"Deleted inline policy {policy_name} from {identifier}")

    def _remove_from_instance_profiles(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        paginator = client.get_paginator("list_instance_profiles_for_role")
        for page in paginator.paginate(RoleName=identifier):
            for profile in page.get("InstanceProfiles", []):
                client.remove_role_from_instance_profile(
                    InstanceProfileName=profile["InstanceProfileName"],
                    RoleName=identifier,
                )
                self.logger.debug(f"Removed {identifier} from instance profile {profile['InstanceProfileName']}")
