from sqlalchemy import (
    Column, String, Integer, DateTime, Boolean
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from uuid import uuid4

Base = declarative_base()

def gen_uuid():
    return str(uuid4())

class MachineDB(Base):
    __tablename__ = "machines"

    id = Column(String, primary_key=True, default=gen_uuid)
    ip = Column(String, nullable=False, unique=True)
    hostname = Column(String, nullable=False)
    cpu_cores = Column(Integer, nullable=False)
    ram = Column(Integer, nullable=False)
    netdata_container_id = Column(String, nullable=False)
    owner_user_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class ContainerDB(Base):
    __tablename__ = "containers"

    id = Column(String, primary_key=True)  # assigned by the remote daemon
    name = Column(String, nullable=False)
    machine_id = Column(String, nullable=False, index=True)  # outlives its machine row on deregistration
    on_reverse_proxy = Column(Boolean, default=False, nullable=False)
    port = Column(Integer, nullable=False)
    status = Column(String, nullable=True)  # RUNNING / STOPPED, unset until first start
    created_at = Column(DateTime(timezone=True), server_default=func.now())
