# fleet/core/database.py
from databases import Database
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url

from fleet.models.db import Base


def sync_url(database_url: str) -> str:
    """Strip the async driver so the schema can be created synchronously."""
    url = make_url(database_url)
    return url.set(drivername=url.get_backend_name()).render_as_string(hide_password=False)


def create_database(database_url: str) -> Database:
    # Create tables if they don't exist (synchronous)
    engine = create_engine(sync_url(database_url))
    Base.metadata.create_all(engine)  # <- machines, containers
    engine.dispose()
    return Database(database_url)
