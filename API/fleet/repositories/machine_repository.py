from databases import Database
from sqlalchemy import select, insert, delete

from fleet.models.db import MachineDB
from fleet.domain.machine import Machine
from fleet.domain.ports import MachineRepository


class SQLMachineRepository(MachineRepository):
    def __init__(self, database: Database):
        self.database = database

    async def create(self, machine: Machine) -> None:
        await self.database.execute(
            insert(MachineDB).values(
                id=machine.id,
                ip=machine.ip,
                hostname=machine.hostname,
                cpu_cores=machine.cpu_cores,
                ram=machine.ram,
                netdata_container_id=machine.netdata_container_id,
                owner_user_id=machine.owner_user_id,
                created_at=machine.created_at,
            )
        )

    async def get(self, machine_id: str) -> Machine | None:
        row = await self.database.fetch_one(
            select(MachineDB).where(MachineDB.id == machine_id)
        )
        return self._to_domain(row) if row else None

    async def get_by_ip(self, ip: str) -> Machine | None:
        row = await self.database.fetch_one(
            select(MachineDB).where(MachineDB.ip == ip)
        )
        return self._to_domain(row) if row else None

    async def list_by_owner(self, owner_user_id: str) -> list[Machine]:
        rows = await self.database.fetch_all(
            select(MachineDB)
            .where(MachineDB.owner_user_id == owner_user_id)
            .order_by(MachineDB.created_at)
        )
        return [self._to_domain(r) for r in rows]

    async def delete(self, machine_id: str) -> None:
        await self.database.execute(
            delete(MachineDB).where(MachineDB.id == machine_id)
        )

    @staticmethod
    def _to_domain(row) -> Machine:
        return Machine(
            id=row["id"],
            ip=row["ip"],
            hostname=row["hostname"],
            cpu_cores=row["cpu_cores"],
            ram=row["ram"],
            netdata_container_id=row["netdata_container_id"],
            owner_user_id=row["owner_user_id"],
            created_at=row["created_at"],
        )
