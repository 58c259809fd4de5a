# src/metrics_server_exporter/collectors/discovery.py
"""
Runtime discovery of the API group/version that serves live usage metrics
and of the resource kinds available under it.
"""

import logging
from typing import List, Tuple

from kubernetes_asyncio import client

from ..core.exceptions import DiscoveryError
from ..models.usage import DiscoveredResourceKind, GroupVersion
from .base_collector import connectivity_errors

logger = logging.getLogger(__name__)

METRICS_GROUP_NAME = "metrics.k8s.io"


def parse_group_version(group_version: str) -> GroupVersion:
    """
    Parse "group/version" (or a bare core "version") into a GroupVersion.

    Raises:
        DiscoveryError: If the string is empty or malformed.
    """
    if not group_version:
        raise DiscoveryError("empty group version")
    parts = group_version.split("/")
    if len(parts) == 1:
        return GroupVersion(version=parts[0])
    if len(parts) == 2 and all(parts):
        return GroupVersion(group=parts[0], version=parts[1])
    raise DiscoveryError(f"unexpected GroupVersion string: {group_version!r}")


class UsageApiDiscovery:
    """Finds the preferred version of the usage-metrics group and its resource kinds."""

    def __init__(self, api_client: client.ApiClient, group_name: str = METRICS_GROUP_NAME):
        self.api_client = api_client
        self.group_name = group_name

    async def preferred_group_version(self) -> GroupVersion:
        with connectivity_errors("get discovered api server groups"):
            groups = await client.ApisApi(self.api_client).get_api_versions()

        for group in groups.groups or []:
            if group.name != self.group_name:
                continue
            preferred = group.preferred_version
            group_version = getattr(preferred, "group_version", None) or ""
            try:
                return parse_group_version(group_version)
            except DiscoveryError as e:
                raise DiscoveryError(f"parsing group version {group_version!r}: {e}") from e

        raise DiscoveryError(f"API group {self.group_name!r} is not served by the cluster")

    async def resource_kinds(self, group_version: GroupVersion) -> List[DiscoveredResourceKind]:
        path = "/api/{version}" if not group_version.group else "/apis/{group}/{version}"
        path_params = {"version": group_version.version}
        if group_version.group:
            path_params["group"] = group_version.group

        with connectivity_errors(f"discover resources for {group_version}"):
            resource_list = await self.api_client.call_api(
                path,
                "GET",
                path_params=path_params,
                header_params={"Accept": "application/json"},
                response_types_map={200: "V1APIResourceList"},
                auth_settings=["BearerToken"],
                _return_http_data_only=True,
            )

        kinds = []
        for resource in resource_list.resources or []:
            # Subresources such as "pods/log" share the list but cannot be listed on their own.
            if "/" in resource.name:
                continue
            kinds.append(DiscoveredResourceKind(name=resource.name, namespaced=bool(resource.namespaced)))
        return kinds

    async def discover(self) -> Tuple[GroupVersion, List[DiscoveredResourceKind]]:
        """
        Raises:
            DiscoveryError: If the usage-metrics group is absent or its version is malformed.
            ConnectivityError: If a discovery call fails.
        """
        group_version = await self.preferred_group_version()
        kinds = await self.resource_kinds(group_version)
        logger.debug(
            "Discovered %s with resources: %s", group_version, ", ".join(kind.name for kind in kinds) or "none"
        )
        return group_version, kinds
