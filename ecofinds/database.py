from functools import lru_cache

from sqlalchemy import create_engine

from ecofinds import config
from ecofinds.storage import JsonFileStorage, SqlStorage, Storage


def build_storage(database_url: str = config.DATABASE_URL, data_dir=config.DATA_DIR) -> Storage:
    """Pick the storage backend: SQL when a database URL is configured, JSON files otherwise."""
    if database_url:
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        engine = create_engine(database_url, connect_args=connect_args)
        return SqlStorage(engine)
    return JsonFileStorage(data_dir)


@lru_cache(maxsize=None)
def get_storage() -> Storage:
    return build_storage()
