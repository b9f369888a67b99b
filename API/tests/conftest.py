import pytest
from unittest.mock import AsyncMock, MagicMock

from fleet.core.config import Settings
from fleet.domain.container import Container
from fleet.domain.machine import Machine


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def machine():
    return Machine(
        id="machine-1",
        ip="10.0.0.5",
        hostname="h1",
        cpu_cores=4,
        ram=8192,
        netdata_container_id="netdata-id",
        owner_user_id="user-1",
    )


@pytest.fixture
def container(machine):
    return Container(
        id="container-1",
        name="ada-lovelace",
        machine_id=machine.id,
        on_reverse_proxy=True,
        port=8080,
    )


@pytest.fixture
def daemon():
    return AsyncMock()


@pytest.fixture
def daemon_factory(daemon):
    factory = MagicMock()
    factory.for_host.return_value = daemon
    return factory
