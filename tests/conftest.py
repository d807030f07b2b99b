import copy
from datetime import datetime

import httpx
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError

from sms_inspector.core.security import hash_password
from sms_inspector.db import mongo
from sms_inspector.main import app
from sms_inspector.services import premiumy_service, proxy_service


# ----------------------------------------------------------------------
# In-memory stand-ins for the Motor collections used by the services
# ----------------------------------------------------------------------

class _Result:
    def __init__(self, inserted_id=None, matched_count=0, modified_count=0, upserted_id=None):
        self.inserted_id = inserted_id
        self.matched_count = matched_count
        self.modified_count = modified_count
        self.upserted_id = upserted_id


def _matches(doc, query):
    for key, expected in query.items():
        value = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


def _project(doc, projection):
    doc = copy.deepcopy(doc)
    for key, flag in (projection or {}).items():
        if not flag:
            doc.pop(key, None)
    return doc


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs.sort(key=lambda d: (d.get(key) is None, d.get(key) or 0), reverse=direction == -1)
        return self

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration

    async def to_list(self, length=None):
        return list(self._docs)


class FakeCollection:
    def __init__(self, unique=()):
        self.docs = []
        self.unique = unique

    def _check_unique(self, doc, skip=None):
        for field in self.unique:
            for other in self.docs:
                if other is not skip and field in doc and other.get(field) == doc[field]:
                    raise DuplicateKeyError(f"duplicate {field}")

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query=None, projection=None):
        return FakeCursor([_project(d, projection) for d in self.docs if _matches(d, query or {})])

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return _Result(inserted_id=doc["_id"])

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if _matches(doc, query):
                changed = dict(doc, **update.get("$set", {}))
                self._check_unique(changed, skip=doc)
                modified = changed != doc
                doc.update(update.get("$set", {}))
                return _Result(matched_count=1, modified_count=int(modified))

        if not upsert:
            return _Result()

        doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
        doc.update(update.get("$setOnInsert", {}))
        doc.update(update.get("$set", {}))
        doc["_id"] = ObjectId()
        self._check_unique(doc)
        self.docs.append(doc)
        return _Result(upserted_id=doc["_id"])


class FakeDatabase:
    def __init__(self):
        self.users = FakeCollection(unique=("email",))
        self.settings = FakeCollection(unique=("key",))

    def __getitem__(self, name):
        return getattr(self, name)

    # Synchronous helpers for arranging test data

    def add_user(self, email, password="password123", name="Test User", is_admin=False,
                 status="active", can_add_numbers=False):
        doc = {
            "_id": ObjectId(),
            "name": name,
            "email": email,
            "password": hash_password(password),
            "status": status,
            "isAdmin": is_admin,
            "canAddNumbers": can_add_numbers,
            "created_at": datetime.utcnow(),
            "updated_at": datetime.utcnow(),
        }
        self.users.docs.append(doc)
        return doc

    def set_setting(self, key, value):
        for doc in self.settings.docs:
            if doc["key"] == key:
                doc["value"] = value
                return
        self.settings.docs.append({"_id": ObjectId(), "key": key, "value": value})

    def get_setting(self, key):
        for doc in self.settings.docs:
            if doc["key"] == key:
                return doc["value"]
        return None


class MockUpstream:
    """
    httpx.MockTransport factory that records every request and the proxy URL
    each transport was built for.
    """

    def __init__(self):
        self.requests = []
        self.proxies = []
        self.status_code = 200
        self.text = ""
        self.error = None

    def respond(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text
        self.error = None

    def fail(self, error):
        self.error = error

    def _handler(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.text)

    def factory(self, proxy_url):
        self.proxies.append(proxy_url)
        return httpx.MockTransport(self._handler)


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------

@pytest.fixture
def db(monkeypatch):
    fake = FakeDatabase()
    monkeypatch.setattr(mongo, "_database", fake)
    return fake


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def premiumy(monkeypatch):
    upstream = MockUpstream()
    monkeypatch.setattr(
        premiumy_service,
        "_premiumy_service",
        premiumy_service.PremiumyService(transport_factory=upstream.factory),
    )
    return upstream


@pytest.fixture
def proxy_echo(monkeypatch):
    upstream = MockUpstream()
    upstream.respond(200, '{"ip": "203.0.113.7"}')
    monkeypatch.setattr(
        proxy_service,
        "_proxy_service",
        proxy_service.ProxyService(transport_factory=upstream.factory),
    )
    return upstream


def login(client, email, password="password123"):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def user_client(client, db):
    db.add_user("user@example.com")
    login(client, "user@example.com")
    return client


@pytest.fixture
def admin_client(client, db):
    admin = db.add_user("admin@example.com", name="Admin", is_admin=True)
    login(client, "admin@example.com")
    response = client.post("/api/v1/admin/login", json={"username": "admin", "password": "admin"})
    assert response.status_code == 200, response.text
    client.admin_doc = admin
    return client
