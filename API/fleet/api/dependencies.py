from fastapi import Request

from fleet.services.container_service import ContainerService
from fleet.services.machine_service import MachineService
from fleet.services.stats_service import StatsService

# Services are built once in the app lifespan (see fleet.main) and kept on
# app.state; tests swap them through app.dependency_overrides.


def get_machine_service(request: Request) -> MachineService:
    return request.app.state.machine_service


def get_container_service(request: Request) -> ContainerService:
    return request.app.state.container_service


def get_stats_service(request: Request) -> StatsService:
    return request.app.state.stats_service
