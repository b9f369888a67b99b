import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleet.api import containers
from fleet.api import machines
from fleet.api.errors import register_exception_handlers
from fleet.core.config import Settings, get_settings
from fleet.core.database import create_database
from fleet.core.logging import configure_logging

from fleet.repositories.container_repository import SQLContainerRepository
from fleet.repositories.machine_repository import SQLMachineRepository

from fleet.services.container_service import ContainerService
from fleet.services.docker_runtime import DockerDaemonClientFactory
from fleet.services.image_puller import ImagePuller
from fleet.services.machine_service import MachineService
from fleet.services.naming import NameGenerator
from fleet.services.sidecars import SidecarProvisioner
from fleet.services.stats_service import StatsService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    # ---------- Startup / Shutdown ----------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = create_database(settings.DATABASE_URL)
        await database.connect()
        http_client = httpx.AsyncClient(timeout=settings.STATS_TIMEOUT)

        machine_repo = SQLMachineRepository(database)
        container_repo = SQLContainerRepository(database)
        daemon_factory = DockerDaemonClientFactory(settings)
        image_puller = ImagePuller()

        app.state.machine_service = MachineService(
            machine_repo, daemon_factory, image_puller, SidecarProvisioner(settings)
        )
        app.state.container_service = ContainerService(
            machine_repo, container_repo, daemon_factory, image_puller, NameGenerator()
        )
        app.state.stats_service = StatsService(
            machine_repo, container_repo, http_client, settings
        )
        logger.info("Fleet control plane started (database: %s)", settings.DATABASE_URL)

        yield

        await http_client.aclose()
        await database.disconnect()
        logger.info("Database disconnected")

    app = FastAPI(title="Fleet Control Plane", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(machines.router)
    app.include_router(containers.router)
    return app


app = create_app()
