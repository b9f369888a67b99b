from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MachineRegisterRequest(CamelModel):
    ip: str = Field(..., description="Address of the host's Docker daemon, e.g. 10.0.0.5")
    hostname: str
    cpu_cores: int
    ram: int = Field(..., description="RAM in MB")


class MachineDeregisterRequest(CamelModel):
    id: str


class MachineResponse(CamelModel):
    id: str
    ip: str
    hostname: str
    cpu_cores: int
    ram: int
    netdata_container_id: str
    owner_user_id: str
    created_at: datetime | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "f3a0b8e7-1c2d-4b1a-9f3e-8d9a0c1a1b2c",
                "ip": "10.0.0.5",
                "hostname": "h1",
                "cpuCores": 4,
                "ram": 8192,
                "netdataContainerId": "9a0b8c7d6e5f4a3b2c1d0e9f8a7b6c5d",
                "ownerUserId": "user-1",
            }
        }
    )
