from databases import Database
from sqlalchemy import select, insert, update

from fleet.models.db import ContainerDB
from fleet.domain.container import Container, ContainerStatus
from fleet.domain.ports import ContainerRepository


class SQLContainerRepository(ContainerRepository):
    def __init__(self, database: Database):
        self.database = database

    async def create(self, container: Container) -> None:
        await self.database.execute(
            insert(ContainerDB).values(
                id=container.id,
                name=container.name,
                machine_id=container.machine_id,
                on_reverse_proxy=container.on_reverse_proxy,
                port=container.port,
                status=container.status.value if container.status else None,
                created_at=container.created_at,
            )
        )

    async def get(self, container_id: str, machine_id: str | None = None) -> Container | None:
        query = select(ContainerDB).where(ContainerDB.id == container_id)
        if machine_id is not None:
            query = query.where(ContainerDB.machine_id == machine_id)

        row = await self.database.fetch_one(query)
        if not row:
            return None
        return self._to_domain(row)

    async def list_by_machine(self, machine_id: str) -> list[Container]:
        rows = await self.database.fetch_all(
            select(ContainerDB)
            .where(ContainerDB.machine_id == machine_id)
            .order_by(ContainerDB.created_at)
        )
        return [self._to_domain(r) for r in rows]

    async def update_status(
        self,
        container_id: str,
        machine_id: str,
        status: ContainerStatus,
    ) -> None:
        # Keyed on both ids: a container id paired with the wrong machine
        # must never touch another machine's record.
        await self.database.execute(
            update(ContainerDB)
            .where(ContainerDB.id == container_id)
            .where(ContainerDB.machine_id == machine_id)
            .values(status=status.value)
        )

    @staticmethod
    def _to_domain(row) -> Container:
        return Container(
            id=row["id"],
            name=row["name"],
            machine_id=row["machine_id"],
            on_reverse_proxy=row["on_reverse_proxy"],
            port=row["port"],
            status=ContainerStatus(row["status"]) if row["status"] else None,
            created_at=row["created_at"],
        )
