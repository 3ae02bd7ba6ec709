import pytest
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import OperationFailure

from db_core import MongoSettings
from bookstore_repo import BookstoreManager
from bookstore_repo.sample_data import sample_books


class StubCursor:
    def __init__(self, error=None, docs=None):
        self.error = error
        self.docs = docs or []

    async def to_list(self, length=None):
        if self.error:
            raise self.error
        return list(self.docs)

    async def explain(self):
        if self.error:
            raise self.error
        return {"queryPlanner": {"winningPlan": {"stage": "FETCH"}}}


class RecordingCollection:
    """Collection double that records what the manager sends to the store."""

    def __init__(self, error=None, rows=None):
        self.error = error
        self.rows = rows or []
        self.indexes = []
        self.queries = []
        self.pipelines = []

    async def create_index(self, keys):
        if self.error:
            raise self.error
        self.indexes.append(keys)
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    def find(self, query):
        self.queries.append(query)
        return StubCursor(self.error)

    def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        return StubCursor(self.error, self.rows)


class StubDatabase:
    def __init__(self, collection):
        self.collection = collection

    def __getitem__(self, name):
        return self.collection


class StubAdmin:
    def __init__(self, error=None):
        self.error = error
        self.commands = []

    async def command(self, name):
        self.commands.append(name)
        if self.error:
            raise self.error
        return {"ok": 1}


class StubClient:
    def __init__(self, error=None, collection=None):
        self.admin = StubAdmin(error)
        self.collection = collection or RecordingCollection()
        self.closed = False
        self.listed_databases = 0

    async def list_database_names(self):
        self.listed_databases += 1
        return ["admin", "bookstore_test"]

    def close(self):
        self.closed = True

    def __getitem__(self, name):
        return StubDatabase(self.collection)


@pytest.fixture()
def test_settings():
    return MongoSettings(
        uri="mongodb://stub:27017",
        db_name="bookstore_test",
        collection="books",
        timeout_ms=100,
    )


@pytest.fixture()
def manager(test_settings):
    return BookstoreManager.from_client(AsyncMongoMockClient(), test_settings)


@pytest.fixture()
async def seeded(manager):
    await manager.insert_books(sample_books())
    return manager


@pytest.fixture()
def recording():
    return RecordingCollection()


@pytest.fixture()
def stub_manager(test_settings, recording):
    return BookstoreManager.from_client(StubClient(collection=recording), test_settings)


@pytest.fixture()
def stub_client_cls():
    return StubClient


@pytest.fixture()
def failing_manager(test_settings):
    collection = RecordingCollection(error=OperationFailure("boom"))
    return BookstoreManager.from_client(StubClient(collection=collection), test_settings)


@pytest.fixture()
def recording_cls():
    return RecordingCollection
