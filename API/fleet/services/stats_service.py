import logging
from enum import Enum
from typing import Any

import httpx

from fleet.core.config import Settings
from fleet.domain.errors import NotFound, RemoteOperationFailed
from fleet.domain.ports import ContainerRepository, MachineRepository

logger = logging.getLogger(__name__)


class StatsResource(str, Enum):
    CPU = "cpu"
    MEM = "mem"
    NET = "net"


# netdata names each container's cgroup charts after the container name
CHART_SUFFIXES = {
    StatsResource.CPU: "cpu",
    StatsResource.MEM: "mem_usage",
    StatsResource.NET: "net_eth0",
}


def chart_name(container_name: str, resource: StatsResource) -> str:
    return f"cgroup_{container_name}.{CHART_SUFFIXES[resource]}"


class StatsService:
    """Reads a container's time series from the netdata sidecar on its machine."""

    def __init__(
        self,
        machine_repo: MachineRepository,
        container_repo: ContainerRepository,
        http_client: httpx.AsyncClient,
        settings: Settings,
    ):
        self.machine_repo = machine_repo
        self.container_repo = container_repo
        self.http_client = http_client
        self.settings = settings

    async def get_stats(self, machine_id: str, container_id: str, resource: StatsResource) -> Any:
        container = await self.container_repo.get(container_id, machine_id=machine_id)
        if not container:
            raise NotFound("container not found")
        machine = await self.machine_repo.get(container.machine_id)
        if not machine:
            raise NotFound("machine not found")

        url = f"http://{machine.ip}:{self.settings.NETDATA_PORT}{self.settings.NETDATA_DATA_PATH}"
        chart = chart_name(container.name, resource)
        try:
            response = await self.http_client.get(url, params={"chart": chart})
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            # Unreachable host and agent errors are reported alike
            logger.error("Stats query %s on %s failed: %s", chart, machine.ip, e)
            raise RemoteOperationFailed("something went wrong") from e
