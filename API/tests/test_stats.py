# tests/test_stats.py
import httpx
import pytest
from unittest.mock import AsyncMock

from fleet.domain.errors import NotFound, RemoteOperationFailed
from fleet.services.stats_service import StatsResource, StatsService

SERIES = {"labels": ["time", "user", "system"], "data": [[1700000000, 1.5, 0.5]]}


def make_service(machine, container, settings, handler):
    machine_repo = AsyncMock()
    container_repo = AsyncMock()
    machine_repo.get = AsyncMock(return_value=machine)
    container_repo.get = AsyncMock(return_value=container)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StatsService(machine_repo, container_repo, http_client, settings), container_repo


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "resource, chart",
    [
        (StatsResource.CPU, "cgroup_ada-lovelace.cpu"),
        (StatsResource.MEM, "cgroup_ada-lovelace.mem_usage"),
        (StatsResource.NET, "cgroup_ada-lovelace.net_eth0"),
    ],
)
async def test_stats_queries_container_chart(machine, container, settings, resource, chart):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=SERIES)

    service, container_repo = make_service(machine, container, settings, handler)

    result = await service.get_stats(machine.id, container.id, resource)

    assert result == SERIES
    container_repo.get.assert_awaited_once_with(container.id, machine_id=machine.id)
    assert len(seen) == 1
    url = seen[0].url
    assert (url.host, url.port, url.path) == ("10.0.0.5", 19999, "/api/v1/data")
    assert url.params["chart"] == chart


@pytest.mark.asyncio
async def test_stats_unknown_container_under_machine(machine, settings):
    def handler(request):
        raise AssertionError("netdata must not be queried")

    service, _ = make_service(machine, None, settings, handler)

    with pytest.raises(NotFound, match="container not found"):
        await service.get_stats(machine.id, "container-1", StatsResource.MEM)


@pytest.mark.asyncio
async def test_stats_agent_error_is_generic_failure(machine, container, settings):
    service, _ = make_service(
        machine, container, settings, lambda request: httpx.Response(500, text="boom")
    )

    with pytest.raises(RemoteOperationFailed, match="something went wrong"):
        await service.get_stats(machine.id, container.id, StatsResource.CPU)


@pytest.mark.asyncio
async def test_stats_unreachable_host_is_generic_failure(machine, container, settings):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    service, _ = make_service(machine, container, settings, handler)

    with pytest.raises(RemoteOperationFailed, match="something went wrong"):
        await service.get_stats(machine.id, container.id, StatsResource.NET)
