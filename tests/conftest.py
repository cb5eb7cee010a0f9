"""Shared pytest fixtures.

MongoDB is replaced by a small in-memory double that implements the subset of
the async pymongo collection API used by the services.
"""

import asyncio
import copy
from collections.abc import Iterator
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from webfiles.app import App
from webfiles.config import Config
from webfiles.core.core import Core
from webfiles.web.server import create_fastapi_app

SECRET = "test-signing-key-0123456789abcdef0123456789abcdef"


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    def __aiter__(self) -> "FakeCursor":
        self._iter = iter(self._docs)
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.unique_keys: list[tuple[str, ...]] = []
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        self._check()
        if unique:
            self.unique_keys.append(tuple(key for key, _ in keys))
        return "_".join(key for key, _ in keys)

    async def insert_one(self, doc: dict[str, Any]) -> SimpleNamespace:
        self._check()
        for fields in [("_id",), *self.unique_keys]:
            if any(all(existing.get(f) == doc.get(f) for f in fields) for existing in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {fields}")
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._check()
        return next((copy.deepcopy(doc) for doc in self.docs if _matches(doc, query)), None)

    def find(self, query: dict[str, Any]) -> FakeCursor:
        self._check()
        return FakeCursor([copy.deepcopy(doc) for doc in self.docs if _matches(doc, query)])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> SimpleNamespace:
        self._check()
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, upserted_id=None)
        if upsert:
            doc = {**query, **update.get("$setOnInsert", {}), **update.get("$set", {})}
            await self.insert_one(doc)
            return SimpleNamespace(matched_count=0, upserted_id=doc["_id"])
        return SimpleNamespace(matched_count=0, upserted_id=None)

    async def delete_one(self, query: dict[str, Any]) -> SimpleNamespace:
        self._check()
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query: dict[str, Any]) -> int:
        self._check()
        return sum(1 for doc in self.docs if _matches(doc, query))


class FakeDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


class FakeMongoClient:
    def __init__(self) -> None:
        self.databases: dict[str, FakeDatabase] = {}
        self.closed = False

    def get_database(self, name: str) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def config(tmp_path):
    """Configuration with storage under a temporary directory."""
    return Config(
        signing_key=SECRET,
        database_url="mongodb://localhost:27017/webfiles_test",
        files_path=str(tmp_path / "uploads"),
        max_file_size=1024,
    )


@pytest.fixture
def mongo_client():
    return FakeMongoClient()


@pytest.fixture
def database(mongo_client):
    return mongo_client.get_database("webfiles_test")


@pytest.fixture
def app(config, mongo_client):
    return App(config, mongo_client=mongo_client)


@pytest.fixture
def core(app) -> Core:
    """Started core with all services initialized."""
    core = app._core
    asyncio.run(core.on_start())
    return core


@pytest.fixture
def client(app, config) -> Iterator[TestClient]:
    """HTTP client against the full application, lifespan included."""
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client
