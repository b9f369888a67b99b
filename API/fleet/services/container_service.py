# fleet/services/container_service.py
import logging
from typing import List

from fleet.domain.container import Container, ContainerSpec, ContainerStatus
from fleet.domain.errors import NotFound
from fleet.domain.machine import Machine
from fleet.domain.ports import ContainerRepository, DaemonClient, DaemonClientFactory, MachineRepository
from fleet.services.image_puller import ImagePuller
from fleet.services.naming import NameGenerator, routing_labels

logger = logging.getLogger(__name__)


class ContainerService:
    def __init__(
        self,
        machine_repo: MachineRepository,
        container_repo: ContainerRepository,
        daemon_factory: DaemonClientFactory,
        image_puller: ImagePuller,
        name_generator: NameGenerator,
    ):
        self.machine_repo = machine_repo
        self.container_repo = container_repo
        self.daemon_factory = daemon_factory
        self.image_puller = image_puller
        self.name_generator = name_generator

    # -------------------------------
    # CRUD
    # -------------------------------
    async def create_container(
        self,
        *,
        machine_id: str,
        image: str,
        on_reverse_proxy: bool,
        port: int,
    ) -> Container:
        """
        Pull `image` on the machine and create (not start) a container from it.
        The record is only written once the daemon has assigned an id.
        """
        machine = await self._get_machine(machine_id)

        daemon = self.daemon_factory.for_host(machine.ip)
        try:
            await self.image_puller.pull(daemon, image)

            name = self.name_generator.generate()
            spec = ContainerSpec(
                image=image,
                name=name,
                labels=routing_labels(name, port) if on_reverse_proxy else None,
            )
            docker_id = await daemon.create_container(spec)
        finally:
            await daemon.close()

        container = Container(
            id=docker_id,
            name=name,
            machine_id=machine.id,
            on_reverse_proxy=on_reverse_proxy,
            port=port,
        )
        await self.container_repo.create(container)
        logger.info("Created container %s (%s) on machine %s", name, docker_id, machine.id)
        return container

    async def list_containers(self, machine_id: str) -> List[Container]:
        machine = await self._get_machine(machine_id)
        return await self.container_repo.list_by_machine(machine.id)

    # -------------------------------
    # Docker lifecycle
    # -------------------------------
    async def start_container(self, machine_id: str, container_id: str) -> Container:
        return await self._transition(
            machine_id, container_id, ContainerStatus.RUNNING,
            lambda daemon: daemon.start_container(container_id),
        )

    async def restart_container(self, machine_id: str, container_id: str) -> Container:
        return await self._transition(
            machine_id, container_id, ContainerStatus.RUNNING,
            lambda daemon: daemon.restart_container(container_id),
        )

    async def stop_container(self, machine_id: str, container_id: str) -> Container:
        return await self._transition(
            machine_id, container_id, ContainerStatus.STOPPED,
            lambda daemon: daemon.stop_container(container_id),
        )

    #-----------------------------------------------------------------------------
    #
    #  Internal methods
    #
    #-----------------------------------------------------------------------------
    async def _get_machine(self, machine_id: str) -> Machine:
        machine = await self.machine_repo.get(machine_id)
        if not machine:
            raise NotFound("machine not found")
        return machine

    async def _transition(self, machine_id: str, container_id: str, status: ContainerStatus, action) -> Container:
        """
        Run `action` against the container, refresh the machine's netdata
        sidecar, then record `status`.

        netdata only discovers the cgroups of newly started containers when it
        restarts itself, so a failed refresh fails the whole call. The status
        is written optimistically and is not read back from the daemon.
        """
        machine = await self._get_machine(machine_id)
        container = await self.container_repo.get(container_id, machine_id=machine.id)
        if not container:
            raise NotFound("container not found")

        daemon: DaemonClient = self.daemon_factory.for_host(machine.ip)
        try:
            await action(daemon)
            await daemon.restart_container(machine.netdata_container_id)
        finally:
            await daemon.close()

        await self.container_repo.update_status(container.id, machine.id, status)
        container.status = status
        logger.info("Container %s on machine %s is now %s", container.id, machine.id, status.value)
        return container
