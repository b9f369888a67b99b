# fleet/services/machine_service.py
import logging
from typing import List

from fleet.domain.errors import Conflict, NotFound
from fleet.domain.machine import Machine
from fleet.domain.ports import DaemonClientFactory, MachineRepository
from fleet.services.image_puller import ImagePuller
from fleet.services.sidecars import ProvisioningSteps, SidecarProvisioner

logger = logging.getLogger(__name__)


class MachineService:
    def __init__(
        self,
        machine_repo: MachineRepository,
        daemon_factory: DaemonClientFactory,
        image_puller: ImagePuller,
        provisioner: SidecarProvisioner,
    ):
        self.machine_repo = machine_repo
        self.daemon_factory = daemon_factory
        self.image_puller = image_puller
        self.provisioner = provisioner

    # -------------------------------
    # Registration
    # -------------------------------
    async def register(
        self,
        *,
        ip: str,
        hostname: str,
        cpu_cores: int,
        ram: int,
        owner_user_id: str,
    ) -> Machine:
        """
        Provision the monitoring and routing sidecars on `ip`, then record the machine.

        If anything fails after the first sidecar was created, the created
        sidecars are removed again before the error propagates.
        """
        if await self.machine_repo.get_by_ip(ip):
            raise Conflict("machine is already registered")

        daemon = self.daemon_factory.for_host(ip)
        try:
            for image in self.provisioner.images:
                await self.image_puller.pull(daemon, image)

            steps = ProvisioningSteps(daemon)
            sidecars = await self.provisioner.provision(steps)

            machine = Machine(
                ip=ip,
                hostname=hostname,
                cpu_cores=cpu_cores,
                ram=ram,
                netdata_container_id=sidecars.netdata_container_id,
                owner_user_id=owner_user_id,
            )
            try:
                await self.machine_repo.create(machine)
            except BaseException as exc:
                await steps.rollback(await self._record_write_failure(ip, exc))
        finally:
            await daemon.close()

        logger.info("Registered machine %s (%s) for user %s", machine.id, ip, owner_user_id)
        return machine

    async def _record_write_failure(self, ip: str, exc: BaseException) -> BaseException:
        """Error to report once the sidecars of a failed record write are rolled back."""
        if not isinstance(exc, Exception):
            return exc
        try:
            taken = await self.machine_repo.get_by_ip(ip)
        except Exception as e:
            logger.error("Could not re-check %s after the record write failed: %s", ip, e)
            return exc
        # Lost a race with a concurrent registration of the same ip
        if taken:
            return Conflict("machine is already registered")
        return exc

    async def deregister(self, machine_id: str) -> None:
        """
        Delete the machine record only. Sidecars and application containers
        keep running on the host and their container records are kept.
        """
        machine = await self.get_machine(machine_id)
        await self.machine_repo.delete(machine.id)
        logger.info("Deregistered machine %s (%s)", machine.id, machine.ip)

    # -------------------------------
    # Queries
    # -------------------------------
    async def get_machine(self, machine_id: str) -> Machine:
        machine = await self.machine_repo.get(machine_id)
        if not machine:
            raise NotFound("machine not found")
        return machine

    async def list_machines(self, owner_user_id: str) -> List[Machine]:
        return await self.machine_repo.list_by_owner(owner_user_id)
