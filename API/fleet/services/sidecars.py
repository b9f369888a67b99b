import logging
from dataclasses import dataclass, field
from typing import NoReturn

from fleet.core.config import Settings
from fleet.domain.container import ContainerSpec
from fleet.domain.errors import PartiallyProvisioned, RemoteOperationFailed
from fleet.domain.ports import DaemonClient

logger = logging.getLogger(__name__)

DOCKER_SOCKET = "/var/run/docker.sock"
WILDCARD_ADDRESSES = ("0.0.0.0", "::")


@dataclass
class ProvisionedSidecars:
    netdata_container_id: str
    traefik_container_id: str


@dataclass
class ProvisioningSteps:
    """
    Ledger of containers created on a remote host during one provisioning run.
    `rollback` force-removes them, newest first.
    """
    daemon: DaemonClient
    created: list[str] = field(default_factory=list)

    async def create(self, spec: ContainerSpec) -> str:
        container_id = await self.daemon.create_container(spec)
        self.created.append(container_id)
        return container_id

    async def rollback(self, cause: BaseException) -> NoReturn:
        """Undo every recorded step, then re-raise `cause` or PartiallyProvisioned."""
        leftovers = []
        for container_id in reversed(self.created):
            try:
                await self.daemon.remove_container(container_id)
                logger.warning("Rolled back sidecar %s", container_id)
            except RemoteOperationFailed as e:
                logger.error("Could not roll back sidecar %s: %s", container_id, e)
                leftovers.append(container_id)
        self.created.clear()

        if leftovers:
            raise PartiallyProvisioned(
                f"{cause}; sidecars left on host: {', '.join(leftovers)}",
                leftover_container_ids=leftovers,
            ) from cause
        raise cause


def netdata_spec(settings: Settings) -> ContainerSpec:
    return ContainerSpec(
        image=settings.NETDATA_IMAGE,
        network_mode="host",
        pid_mode="host",
        volumes={
            "netdataconfig": "/etc/netdata",
            "netdatalib": "/var/lib/netdata",
            "netdatacache": "/var/cache/netdata",
        },
        binds=[
            "/etc/passwd:/host/etc/passwd:ro",
            "/etc/group:/host/etc/group:ro",
            "/proc:/host/proc:ro",
            "/sys:/host/sys:ro",
            "/etc/os-release:/host/etc/os-release:ro",
            f"{DOCKER_SOCKET}:{DOCKER_SOCKET}:ro",
        ],
        cap_add=["SYS_PTRACE", "SYS_ADMIN"],
        security_opt=["apparmor=unconfined"],
        restart_policy="always",
    )


def traefik_spec(settings: Settings) -> ContainerSpec:
    ports = (settings.TRAEFIK_ENTRYPOINT_PORT, settings.TRAEFIK_DASHBOARD_PORT)
    return ContainerSpec(
        image=settings.TRAEFIK_IMAGE,
        command=["--api.insecure=true", "--providers.docker=true"],
        binds=[f"{DOCKER_SOCKET}:{DOCKER_SOCKET}"],
        port_bindings={
            f"{port}/tcp": [(address, port) for address in WILDCARD_ADDRESSES]
            for port in ports
        },
    )


class SidecarProvisioner:
    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def images(self) -> list[str]:
        """Images that must be on the host before `provision` runs, in pull order."""
        return [self.settings.NETDATA_IMAGE, self.settings.TRAEFIK_IMAGE]

    async def provision(self, steps: ProvisioningSteps) -> ProvisionedSidecars:
        """
        Create both sidecars, then start them, monitoring agent first.
        A failure rolls back whatever was already created.
        """
        try:
            netdata_id = await steps.create(netdata_spec(self.settings))
            traefik_id = await steps.create(traefik_spec(self.settings))
            await steps.daemon.start_container(netdata_id)
            logger.info("Started netdata sidecar %s", netdata_id)
            await steps.daemon.start_container(traefik_id)
            logger.info("Started traefik sidecar %s", traefik_id)
        except BaseException as e:
            await steps.rollback(e)

        return ProvisionedSidecars(
            netdata_container_id=netdata_id,
            traefik_container_id=traefik_id,
        )
