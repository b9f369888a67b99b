from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from fleet.api.dependencies import get_container_service, get_stats_service
from fleet.core.security import get_current_user_id
from fleet.services.container_service import ContainerService
from fleet.services.stats_service import StatsService
from fleet.schemas.container import (
    ContainerCreateRequest,
    ContainerActionRequest,
    ContainerStatsRequest,
    ContainerResponse,
)

router = APIRouter(
    prefix="/container",
    tags=["containers"],
    dependencies=[Depends(get_current_user_id)],
)


@router.post("/create", response_class=PlainTextResponse)
async def create_container(
    payload: ContainerCreateRequest,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.create_container(
        machine_id=payload.machine_id,
        image=payload.image,
        on_reverse_proxy=payload.on_reverse_proxy,
        port=payload.port,
    )
    return "container created"


@router.post("/start", response_class=PlainTextResponse)
async def start_container(
    payload: ContainerActionRequest,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.start_container(payload.machine_id, payload.container_id)
    return "container started"


@router.post("/restart", response_class=PlainTextResponse)
async def restart_container(
    payload: ContainerActionRequest,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.restart_container(payload.machine_id, payload.container_id)
    return "container restarted"


@router.post("/stop", response_class=PlainTextResponse)
async def stop_container(
    payload: ContainerActionRequest,
    container_service: ContainerService = Depends(get_container_service),
):
    await container_service.stop_container(payload.machine_id, payload.container_id)
    return "container stopped"


@router.post("/stats", summary="Time series for one container from the machine's netdata sidecar")
async def container_stats(
    payload: ContainerStatsRequest,
    stats_service: StatsService = Depends(get_stats_service),
):
    return await stats_service.get_stats(payload.machine_id, payload.container_id, payload.resource)


@router.get("", response_model=list[ContainerResponse])
async def list_containers(
    machine_id: str = Query(..., alias="machineId"),
    container_service: ContainerService = Depends(get_container_service),
):
    containers = await container_service.list_containers(machine_id)
    return [ContainerResponse.model_validate(c) for c in containers]
