import re

from faker import Faker

_NOT_NAME_CHARS = re.compile(r"[^a-z0-9]")


class NameGenerator:
    """Human-readable container names such as `ada-lovelace`. Collisions are not checked."""

    def __init__(self, faker: Faker | None = None):
        self.faker = faker or Faker()

    def generate(self) -> str:
        first = _NOT_NAME_CHARS.sub("", self.faker.first_name().lower())
        last = _NOT_NAME_CHARS.sub("", self.faker.last_name().lower())
        return f"{first}-{last}"


def routing_labels(container_name: str, port: int) -> dict[str, str]:
    """traefik labels routing Host(`<name>`) to the container's `port`."""
    return {
        f"traefik.http.routers.{container_name}.rule": f"Host(`{container_name}`)",
        f"traefik.http.services.{container_name}.loadbalancer.server.port": str(port),
    }
