class FleetError(Exception):
    """Base class for failures surfaced to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Conflict(FleetError):
    pass


class NotFound(FleetError):
    pass


class RemoteOperationFailed(FleetError):
    """A Docker daemon or monitoring agent call did not succeed."""


class PartiallyProvisioned(RemoteOperationFailed):
    """
    Provisioning failed and rolling back what was already created on the
    remote host failed too. `leftover_container_ids` are still on the host.
    """

    def __init__(self, message: str, leftover_container_ids: list[str]):
        super().__init__(message)
        self.leftover_container_ids = leftover_container_ids
