from pydantic import Field
from datetime import datetime
from typing import Optional

from fleet.domain.container import ContainerStatus
from fleet.schemas.machine import CamelModel
from fleet.services.stats_service import StatsResource


class ContainerCreateRequest(CamelModel):
    machine_id: str
    image: str = Field(..., description="Docker image reference, e.g. nginx:latest")
    on_reverse_proxy: bool
    port: int = Field(..., ge=1, le=65535, description="Port the workload listens on")


class ContainerActionRequest(CamelModel):
    machine_id: str
    container_id: str


class ContainerStatsRequest(CamelModel):
    machine_id: str
    container_id: str
    resource: StatsResource


class ContainerResponse(CamelModel):
    id: str
    name: str
    machine_id: str
    on_reverse_proxy: bool
    port: int
    status: Optional[ContainerStatus] = None
    created_at: datetime | None = None
