from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./fleet.db",
        description="Record store for machines and containers"
    )

    # Remote Docker daemon, one per registered machine
    DOCKER_DAEMON_PORT: int = 2375
    DOCKER_API_VERSION: str = Field(
        default="1.41",
        description="Pinned so building a client never has to ask the daemon; 1.41 is served by Docker 20.10 and later"
    )
    DOCKER_DAEMON_TIMEOUT: int = Field(
        default=120,
        description="Seconds before a daemon call is abandoned"
    )

    # Monitoring sidecar
    NETDATA_IMAGE: str = "netdata/netdata:v1.43.2"
    NETDATA_PORT: int = 19999
    NETDATA_DATA_PATH: str = "/api/v1/data"

    # Routing sidecar
    TRAEFIK_IMAGE: str = "traefik:v2.10"
    TRAEFIK_ENTRYPOINT_PORT: int = 80
    TRAEFIK_DASHBOARD_PORT: int = 8080

    STATS_TIMEOUT: float = 10.0

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    model_config = ConfigDict(
        env_file=".env"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
