from typing import AsyncIterator, Protocol, List

from fleet.domain.container import Container, ContainerSpec, ContainerStatus
from fleet.domain.machine import Machine


class MachineRepository(Protocol):
    async def create(self, machine: Machine) -> None: ...

    async def get(self, machine_id: str) -> Machine | None: ...

    async def get_by_ip(self, ip: str) -> Machine | None: ...

    async def list_by_owner(self, owner_user_id: str) -> List[Machine]: ...

    async def delete(self, machine_id: str) -> None: ...


class ContainerRepository(Protocol):
    async def create(self, container: Container) -> None: ...

    async def get(self, container_id: str, machine_id: str | None = None) -> Container | None: ...

    async def list_by_machine(self, machine_id: str) -> List[Container]: ...

    async def update_status(
        self,
        container_id: str,
        machine_id: str,
        status: ContainerStatus,
    ) -> None: ...


class DaemonClient(Protocol):
    """A handle bound to one host's Docker daemon."""

    # -------------------------------
    # Images
    # -------------------------------
    def pull_events(self, image: str) -> AsyncIterator[dict]:
        """Start pulling an image and yield the daemon's progress events."""
        ...

    # -------------------------------
    # Containers
    # -------------------------------
    async def create_container(self, spec: ContainerSpec) -> str:
        """Create (but do not start) a container. Returns the daemon id."""
        ...

    async def start_container(self, container_id: str) -> None: ...

    async def stop_container(self, container_id: str) -> None: ...

    async def restart_container(self, container_id: str) -> None: ...

    async def remove_container(self, container_id: str) -> None:
        """Force-remove a container, running or not."""
        ...

    async def close(self) -> None: ...


class DaemonClientFactory(Protocol):
    def for_host(self, ip: str) -> DaemonClient: ...
