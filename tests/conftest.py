# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Fixtures shared by every test module.
#
# Key features:
# - An in-memory stand-in for the students collection, injected into
#   StudentStore so no MongoDB server is needed
# - A TestClient whose lifespan connects and closes that store
# =============================================================================

import copy
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from app import create_app
from database import StudentStore


# =============================================================================
# Collection doubles
# =============================================================================

class InMemoryCursor:
    """Cursor returned by InMemoryCollection.find()."""

    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        documents = [copy.deepcopy(document) for document in self._documents]
        return documents if length is None else documents[:length]


class InMemoryCollection:
    """Implements the collection calls StudentStore makes, keyed by _id."""

    def __init__(self):
        self.documents = {}
        self.calls = []

    async def insert_one(self, document):
        self.calls.append("insert_one")
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, query=None):
        self.calls.append("find")
        return InMemoryCursor(list(self.documents.values()))

    async def find_one(self, query):
        self.calls.append("find_one")
        return copy.deepcopy(self.documents.get(query["_id"]))

    async def find_one_and_replace(self, query, replacement, return_document=ReturnDocument.BEFORE):
        self.calls.append("find_one_and_replace")
        previous = self.documents.get(query["_id"])
        if previous is None:
            return None
        document = copy.deepcopy(replacement)
        document["_id"] = query["_id"]
        self.documents[query["_id"]] = document
        return copy.deepcopy(document if return_document == ReturnDocument.AFTER else previous)

    async def delete_one(self, query):
        self.calls.append("delete_one")
        removed = self.documents.pop(query["_id"], None)
        return SimpleNamespace(deleted_count=0 if removed is None else 1)


class UnreachableCollection:
    """Every call fails the way motor does when the server cannot be reached."""

    def _fail(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("127.0.0.1:27017: [Errno 111] Connection refused")

    async def insert_one(self, document):
        self._fail()

    def find(self, query=None):
        self._fail()

    async def find_one(self, query):
        self._fail()

    async def find_one_and_replace(self, query, replacement, return_document=None):
        self._fail()

    async def delete_one(self, query):
        self._fail()


class BrokenCollection(InMemoryCollection):
    """Fails with an error the student operations do not expect."""

    def find(self, query=None):
        raise RuntimeError("cursor exploded")



# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def collection():
    """Empty in-memory students collection."""
    return InMemoryCollection()


@pytest.fixture
def store(collection):
    """StudentStore wired to the in-memory collection."""
    return StudentStore(collection=collection)


@pytest.fixture
def unreachable_store():
    """StudentStore whose every call raises a connection error."""
    return StudentStore(collection=UnreachableCollection())


@pytest.fixture
def client(store):
    """TestClient running the app lifespan around the in-memory store."""
    with TestClient(create_app(store=store)) as test_client:
        yield test_client


@pytest.fixture
def unreachable_client(unreachable_store):
    with TestClient(create_app(store=unreachable_store)) as test_client:
        yield test_client


@pytest.fixture
def valid_fields():
    """A complete, valid flat field set."""
    return {
        "name": "Al",
        "age": "20",
        "major": "Math",
        "merit": "100",
        "other": "0",
    }


@pytest.fixture
def broken_client():
    """TestClient that returns the error response instead of re-raising."""
    store = StudentStore(collection=BrokenCollection())
    with TestClient(create_app(store=store), raise_server_exceptions=False) as test_client:
        yield test_client
