from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from fleet.api.dependencies import get_machine_service
from fleet.core.security import get_current_user_id
from fleet.services.machine_service import MachineService
from fleet.schemas.machine import (
    MachineRegisterRequest,
    MachineDeregisterRequest,
    MachineResponse,
)

router = APIRouter(
    prefix="/machine",
    tags=["machines"],
    dependencies=[Depends(get_current_user_id)],
)


@router.post(
    "/register",
    response_class=PlainTextResponse,
    summary="Register a Docker host",
    description="Pulls and starts the netdata and traefik sidecars on the host, then records it.",
)
async def register_machine(
    payload: MachineRegisterRequest,
    user_id: str = Depends(get_current_user_id),
    machine_service: MachineService = Depends(get_machine_service),
):
    await machine_service.register(
        ip=payload.ip,
        hostname=payload.hostname,
        cpu_cores=payload.cpu_cores,
        ram=payload.ram,
        owner_user_id=user_id,
    )
    return "server registered"


@router.delete("/deregister", response_class=PlainTextResponse)
async def deregister_machine(
    payload: MachineDeregisterRequest,
    machine_service: MachineService = Depends(get_machine_service),
):
    await machine_service.deregister(payload.id)
    return "machine deregistered"


@router.get("", response_model=list[MachineResponse])
async def list_machines(
    user_id: str = Depends(get_current_user_id),
    machine_service: MachineService = Depends(get_machine_service),
):
    machines = await machine_service.list_machines(user_id)
    return [MachineResponse.model_validate(m) for m in machines]
