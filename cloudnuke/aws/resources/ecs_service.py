"""ECS service resource type.

Services must be drained before deletion and disappear asynchronously, so this
type exercises both teardown steps and confirmation polling.
"""

from __future__ import annotations

from typing import Any, Optional

from ...models.filter_config import FilterConfig
from ...models.resource import Candidate, ProbeFunc, ProbeStatus, TeardownStep
from .base import AwsResourceType, tags_to_dict

# describe_services accepts at most 10 services per call
DESCRIBE_BATCH_SIZE = 10

STABLE_WAITER_DELAY_SECONDS = 15
STABLE_WAITER_MAX_ATTEMPTS = 40


def cluster_from_service_arn(service_arn: str) -> str:
    """Extract the cluster name from a service ARN.

    Long ARN format is arn:aws:ecs:<region>:<account>:service/<cluster>/<service>;
    the legacy format has no cluster segment and maps to the default cluster.
    """
    resource = service_arn.split(":", 5)[-1]
    parts = resource.split("/")
    if len(parts) == 3:
        return parts[1]
    return "default"


class EcsServices(AwsResourceType):
    """ECS services across every cluster in a region."""

    @property
    def name(self) -> str:
        return "ecs-service"

    @property
    def service_name(self) -> str:
        return "ecs"

    def list(self, region: str, filters: FilterConfig) -> list[Candidate]:
        client = self._create_client(region)

        candidates = []
        for cluster_arn in self._cluster_arns(client):
            service_arns = []
            paginator = client.get_paginator("list_services")
            for page in paginator.paginate(cluster=cluster_arn):
                service_arns.extend(page.get("serviceArns", []))

            for start in range(0, len(service_arns), DESCRIBE_BATCH_SIZE):
                response = client.describe_services(
                    cluster=cluster_arn,
                    services=service_arns[start : start + DESCRIBE_BATCH_SIZE],
                    include=["TAGS"],
                )
                for service in response.get("services", []):
                    if service.get("status") != "ACTIVE":
                        continue
                    candidates.append(
                        Candidate(
                            identifier=service["serviceArn"],
                            name=service.get("serviceName"),
                            created_at=service.get("createdAt"),
                            tags=tags_to_dict(service.get("tags")),
                        )
                    )

        self.logger.debug(f"Listed {len(candidates)} ECS services in {region}")
        return candidates

    def teardown_steps(self) -> list[TeardownStep]:
        return [
            TeardownStep("scale-to-zero", self._scale_to_zero),
            TeardownStep("wait-for-stable", self._wait_for_stable),
        ]

    def delete(self, region: str, identifier: str) -> None:
        client = self._create_client(region)
        client.delete_service(cluster=cluster_from_service_arn(identifier), service=identifier, force=True)

    def confirm_probe(self) -> Optional[ProbeFunc]:
        return self._probe

    def _cluster_arns(self, client: Any) -> list[str]:
        arns = []
        paginator = client.get_paginator("list_clusters")
        for page in paginator.paginate():
            arns.extend(page.get("clusterArns", []))
        return arns

    def _describe(self, region: str, identifier: str) -> Optional[dict]:
        client = self._create_client(region)
        response = client.describe_services(cluster=cluster_from_service_arn(identifier), services=[identifier])
        services = response.get("services", [])
        return services[0] if services else None

    def _scale_to_zero(self, region: str, identifier: str) -> None:
        service = self._describe(region, identifier)
        if service is None or service.get("status") == "INACTIVE":
            return
        if service.get("schedulingStrategy") == "DAEMON":
            # Daemon services cannot be scaled
            return

        client = self._create_client(region)
        client.update_service(cluster=cluster_from_service_arn(identifier), service=identifier, desiredCount=0)
        self.logger.debug(f"Scaled {identifier} to zero tasks")

    def _wait_for_stable(self, region: str, identifier: str) -> None:
        service = self._describe(region, identifier)
        if service is None or service.get("status") == "INACTIVE":
            return

        client = self._create_client(region)
        waiter = client.get_waiter("services_stable")
        waiter.wait(
            cluster=cluster_from_service_arn(identifier),
            services=[identifier],
            WaiterConfig={"Delay": STABLE_WAITER_DELAY_SECONDS, "MaxAttempts": STABLE_WAITER_MAX_ATTEMPTS},
        )

    def _probe(self, region: str, identifier: str) -> ProbeStatus:
        service = self._describe(region, identifier)
        if service is None or service.get("status") == "INACTIVE":
            return ProbeStatus.GONE
        return ProbeStatus.PENDING
