# tests/test_container.py
import pytest
from unittest.mock import AsyncMock, MagicMock

from fleet.domain.container import ContainerStatus
from fleet.domain.errors import NotFound, RemoteOperationFailed
from fleet.services.container_service import ContainerService


def make_service(machine_repo, container_repo, daemon_factory, image_puller=None, name="ada-lovelace"):
    name_generator = MagicMock()
    name_generator.generate.return_value = name
    return ContainerService(
        machine_repo,
        container_repo,
        daemon_factory,
        image_puller or AsyncMock(),
        name_generator,
    )


@pytest.mark.asyncio
async def test_create_container_pulls_creates_and_records(machine, daemon, daemon_factory):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    image_puller = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    daemon.create_container = AsyncMock(return_value="docker-id-123")

    service = make_service(machine_repo, container_repo, daemon_factory, image_puller)

    container = await service.create_container(
        machine_id=machine.id,
        image="nginx:latest",
        on_reverse_proxy=True,
        port=8080,
    )

    daemon_factory.for_host.assert_called_once_with("10.0.0.5")
    image_puller.pull.assert_awaited_once_with(daemon, "nginx:latest")

    spec = daemon.create_container.await_args.args[0]
    assert spec.image == "nginx:latest"
    assert spec.name == "ada-lovelace"
    assert spec.labels == {
        "traefik.http.routers.ada-lovelace.rule": "Host(`ada-lovelace`)",
        "traefik.http.services.ada-lovelace.loadbalancer.server.port": "8080",
    }

    assert container.id == "docker-id-123"
    assert container.on_reverse_proxy is True
    assert container.port == 8080
    assert container.status is None
    container_repo.create.assert_awaited_once_with(container)


@pytest.mark.asyncio
async def test_create_container_without_reverse_proxy_sets_no_labels(machine, daemon, daemon_factory):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    daemon.create_container = AsyncMock(return_value="docker-id-123")

    service = make_service(machine_repo, container_repo, daemon_factory)
    container = await service.create_container(
        machine_id=machine.id, image="redis:7", on_reverse_proxy=False, port=6379
    )

    assert daemon.create_container.await_args.args[0].labels is None
    assert container.on_reverse_proxy is False


@pytest.mark.asyncio
async def test_create_container_failed_pull_creates_nothing(machine, daemon, daemon_factory):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    image_puller = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    image_puller.pull = AsyncMock(side_effect=RemoteOperationFailed("pull nginx failed"))

    service = make_service(machine_repo, container_repo, daemon_factory, image_puller)

    with pytest.raises(RemoteOperationFailed):
        await service.create_container(
            machine_id=machine.id, image="nginx", on_reverse_proxy=True, port=80
        )

    daemon.create_container.assert_not_awaited()
    container_repo.create.assert_not_awaited()
    daemon.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_container_unknown_machine(daemon_factory):
    machine_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=None)
    container_repo = AsyncMock()

    service = make_service(machine_repo, container_repo, daemon_factory)

    with pytest.raises(NotFound):
        await service.create_container(
            machine_id="missing", image="nginx", on_reverse_proxy=False, port=80
        )
    daemon_factory.for_host.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "operation, daemon_call, expected_status",
    [
        ("start_container", "start_container", ContainerStatus.RUNNING),
        ("restart_container", "restart_container", ContainerStatus.RUNNING),
        ("stop_container", "stop_container", ContainerStatus.STOPPED),
    ],
)
async def test_lifecycle_refreshes_netdata_then_records_status(
    machine, container, daemon, daemon_factory, operation, daemon_call, expected_status
):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    container_repo.get = AsyncMock(return_value=container)

    # One parent so daemon and repository calls share a single ordered log
    calls = MagicMock()
    calls.attach_mock(daemon, "daemon")
    calls.attach_mock(container_repo, "container_repo")

    service = make_service(machine_repo, container_repo, daemon_factory)
    updated = await getattr(service, operation)(machine.id, container.id)

    assert updated.status == expected_status
    container_repo.get.assert_awaited_once_with(container.id, machine_id=machine.id)
    container_repo.update_status.assert_awaited_once_with(container.id, machine.id, expected_status)

    # Exactly one netdata refresh, after the container call and before the status write
    netdata_restarts = [
        c for c in daemon.restart_container.await_args_list if c.args == ("netdata-id",)
    ]
    assert len(netdata_restarts) == 1

    order = [name for name, args, _ in calls.mock_calls if name != "daemon.close"]
    assert order == [
        "container_repo.get",
        f"daemon.{daemon_call}",
        "daemon.restart_container",
        "container_repo.update_status",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["start_container", "restart_container", "stop_container"])
async def test_lifecycle_unknown_machine_issues_no_remote_calls(daemon_factory, operation):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=None)

    service = make_service(machine_repo, container_repo, daemon_factory)

    with pytest.raises(NotFound, match="machine not found"):
        await getattr(service, operation)("missing", "container-1")

    daemon_factory.for_host.assert_not_called()
    container_repo.update_status.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["start_container", "restart_container", "stop_container"])
async def test_lifecycle_container_of_another_machine_is_not_found(machine, daemon_factory, operation):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    # Scoped lookup by (container id, machine id) finds nothing
    container_repo.get = AsyncMock(return_value=None)

    service = make_service(machine_repo, container_repo, daemon_factory)

    with pytest.raises(NotFound, match="container not found"):
        await getattr(service, operation)(machine.id, "someone-elses-container")

    container_repo.get.assert_awaited_once_with("someone-elses-container", machine_id=machine.id)
    daemon_factory.for_host.assert_not_called()
    container_repo.update_status.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_netdata_refresh_fails_and_keeps_status(machine, container, daemon, daemon_factory):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    container_repo.get = AsyncMock(return_value=container)
    daemon.restart_container = AsyncMock(side_effect=RemoteOperationFailed("restart netdata-id failed"))

    service = make_service(machine_repo, container_repo, daemon_factory)

    with pytest.raises(RemoteOperationFailed):
        await service.start_container(machine.id, container.id)

    daemon.start_container.assert_awaited_once_with(container.id)
    container_repo.update_status.assert_not_awaited()
    assert container.status is None
    daemon.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_containers_requires_machine(machine, container, daemon_factory):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    container_repo.list_by_machine = AsyncMock(return_value=[container])

    service = make_service(machine_repo, container_repo, daemon_factory)

    assert await service.list_containers(machine.id) == [container]

    machine_repo.get = AsyncMock(return_value=None)
    with pytest.raises(NotFound):
        await service.list_containers("missing")
