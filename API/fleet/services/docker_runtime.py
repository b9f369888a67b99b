import asyncio
import logging
from typing import AsyncIterator

import docker
from docker.errors import DockerException
from docker.types import Mount
from docker.utils import parse_repository_tag
from requests.exceptions import RequestException

from fleet.core.config import Settings
from fleet.domain.container import ContainerSpec
from fleet.domain.errors import RemoteOperationFailed
from fleet.domain.ports import DaemonClient, DaemonClientFactory

logger = logging.getLogger(__name__)

# docker-py raises its own errors for API failures but lets requests'
# transport errors (refused connection, read timeout) through untouched.
REMOTE_ERRORS = (DockerException, RequestException)

_DONE = object()


class DockerDaemonClient(DaemonClient):
    """docker SDK client bound to one remote daemon. Blocking calls run in a worker thread."""

    def __init__(self, ip: str, port: int, timeout: int, version: str):
        self.ip = ip
        self.base_url = f"tcp://{ip}:{port}"
        # With an explicit API version the client does not touch the network
        # until the first request
        self.docker_client = docker.DockerClient(
            base_url=self.base_url, version=version, timeout=timeout
        )

    async def _run(self, action: str, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except REMOTE_ERRORS as e:
            logger.error("Daemon %s: %s failed: %s", self.ip, action, e)
            raise RemoteOperationFailed(f"{action} failed on {self.ip}: {e}") from e

    # -------------------------------
    # Images
    # -------------------------------
    async def pull_events(self, image: str) -> AsyncIterator[dict]:
        repository, tag = parse_repository_tag(image)
        stream = await self._run(
            f"pull {image}",
            self.docker_client.api.pull,
            repository,
            tag=tag or "latest",
            stream=True,
            decode=True,
        )
        while True:
            event = await self._run(f"pull {image}", next, stream, _DONE)
            if event is _DONE:
                return
            yield event

    # -------------------------------
    # Container lifecycle
    # -------------------------------
    async def create_container(self, spec: ContainerSpec) -> str:
        container = await self._run(
            f"create {spec.name or spec.image}",
            self.docker_client.containers.create,
            spec.image,
            **self._create_kwargs(spec),
        )
        return container.id

    async def start_container(self, container_id: str) -> None:
        container = await self._run(f"get {container_id}", self.docker_client.containers.get, container_id)
        await self._run(f"start {container_id}", container.start)

    async def stop_container(self, container_id: str) -> None:
        container = await self._run(f"get {container_id}", self.docker_client.containers.get, container_id)
        await self._run(f"stop {container_id}", container.stop)

    async def restart_container(self, container_id: str) -> None:
        container = await self._run(f"get {container_id}", self.docker_client.containers.get, container_id)
        await self._run(f"restart {container_id}", container.restart)

    async def remove_container(self, container_id: str) -> None:
        container = await self._run(f"get {container_id}", self.docker_client.containers.get, container_id)
        await self._run(f"remove {container_id}", container.remove, force=True)

    async def close(self) -> None:
        await asyncio.to_thread(self.docker_client.close)

    @staticmethod
    def _create_kwargs(spec: ContainerSpec) -> dict:
        kwargs = {
            "name": spec.name,
            "command": spec.command,
            "labels": spec.labels,
            "network_mode": spec.network_mode,
            "pid_mode": spec.pid_mode,
            "volumes": spec.binds,
            "mounts": [
                Mount(target=target, source=source, type="volume")
                for source, target in spec.volumes.items()
            ],
            "cap_add": spec.cap_add,
            "security_opt": spec.security_opt,
            "restart_policy": {"Name": spec.restart_policy} if spec.restart_policy else None,
            "ports": spec.port_bindings,
        }
        # Leave unset options to the daemon's defaults
        return {key: value for key, value in kwargs.items() if value}


class DockerDaemonClientFactory(DaemonClientFactory):
    """Builds a fresh client per host address. Nothing is pooled or cached."""

    def __init__(self, settings: Settings):
        self.port = settings.DOCKER_DAEMON_PORT
        self.timeout = settings.DOCKER_DAEMON_TIMEOUT
        self.version = settings.DOCKER_API_VERSION

    def for_host(self, ip: str) -> DockerDaemonClient:
        return DockerDaemonClient(ip, self.port, self.timeout, self.version)
