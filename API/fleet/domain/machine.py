from uuid import uuid4
from datetime import datetime, timezone
from dataclasses import dataclass, field


@dataclass
class Machine:
    ip: str
    hostname: str
    cpu_cores: int
    ram: int
    netdata_container_id: str
    owner_user_id: str
    id: str = field(default_factory=lambda : str(uuid4()))
    created_at: datetime = field(default_factory=lambda : datetime.now(timezone.utc))
