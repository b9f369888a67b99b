from enum import Enum
from datetime import datetime, timezone
from dataclasses import dataclass, field


class ContainerStatus(str, Enum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"


@dataclass
class Container:
    """
    Local record of an application container. `id` is the id the remote
    daemon assigned. `status` is written optimistically after a lifecycle
    call succeeds and is never polled back from the daemon, so it may be stale.
    """
    id: str
    name: str
    machine_id: str
    on_reverse_proxy: bool
    port: int
    status: ContainerStatus | None = None
    created_at: datetime = field(default_factory=lambda : datetime.now(timezone.utc))


@dataclass
class ContainerSpec:
    """What to create on a remote daemon. Empty fields are left to daemon defaults."""
    image: str
    name: str | None = None
    command: list[str] | None = None
    labels: dict[str, str] | None = None
    network_mode: str | None = None
    pid_mode: str | None = None
    binds: list[str] = field(default_factory=list)          # "host:container[:mode]"
    volumes: dict[str, str] = field(default_factory=dict)   # named volume -> target
    cap_add: list[str] = field(default_factory=list)
    security_opt: list[str] = field(default_factory=list)
    restart_policy: str | None = None
    # "80/tcp" -> [(host_ip, host_port), ...]
    port_bindings: dict[str, list[tuple[str, int]]] = field(default_factory=dict)
