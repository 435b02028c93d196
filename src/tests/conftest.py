import pytest
import pytest_asyncio

from vizstore import Context, MemoryStorage, SQLite, Vizstore


@pytest.fixture()
def sqlite_db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest.fixture()
def sqlite_storage(sqlite_db_path):
    return SQLite(sqlite_db_path)


@pytest.fixture()
def memory_storage():
    return MemoryStorage()


@pytest.fixture(params=["sqlite", "memory"])
def storage(request, sqlite_db_path):
    if request.param == "sqlite":
        return SQLite(sqlite_db_path)
    return MemoryStorage()


@pytest_asyncio.fixture()
async def stores(storage):
    stores = Vizstore(storage)
    await stores.init_schema()
    return stores


@pytest.fixture()
def ctx():
    return Context()
