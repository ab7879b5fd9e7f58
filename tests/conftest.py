"""Shared fixtures.

The suite never touches PostgreSQL: the module-level functions of
`catalog.repository` and `auth.repository` are swapped for in-memory fakes
that follow the same contracts (hydrated rows, natural-key lookups, one
all-or-nothing batch insert).
"""

import copy
import itertools
import time
from datetime import datetime, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from auth import repository as auth_repository
from auth import security
from catalog import repository as catalog_repository
from catalog import resources
from core.settings import Settings
from main import create_app

TEST_SETTINGS = Settings(
    jwt_secret="test-access-secret",
    jwt_refresh_secret="test-refresh-secret",
    environment="development",
)

PROD_SETTINGS = Settings(
    jwt_secret="test-access-secret",
    jwt_refresh_secret="test-refresh-secret",
    environment="production",
    cookie_domain=".ekoru.cl",
)


def _sort_value(value):
    return value.lower() if isinstance(value, str) else value


class FakeCatalogStore:
    """In-memory stand-in for `catalog.repository`."""

    def __init__(self):
        self.tables = {path: {} for path in resources.RESOURCES}
        self._ids = itertools.count(1)
        self.fail_batch_insert = False

    def seed(self, path, **values):
        resource = resources.get(path)
        now = datetime.now(timezone.utc)
        row = {"id": next(self._ids)}
        row.update({f.name: values.get(f.name) for f in resource.fields})
        row.update({"createdAt": now, "updatedAt": now})
        self.tables[path][row["id"]] = row
        return copy.deepcopy(row)

    def snapshot(self):
        return copy.deepcopy(self.tables)

    def _hydrate(self, resource, row):
        record = copy.deepcopy(row)
        for f in resource.includes:
            parent_resource = resources.get(f.reference.resource)
            parent = self.tables[parent_resource.path].get(row.get(f.name))
            if parent is None:
                record[f.reference.include] = None
            else:
                nested = {"id": parent["id"]}
                nested.update({pf.name: parent[pf.name] for pf in parent_resource.fields})
                record[f.reference.include] = nested
        return record

    def _sorted(self, resource, rows):
        return sorted(rows, key=lambda r: (_sort_value(r[resource.order_by]), r["id"]))

    def _key(self, resource, row):
        return tuple(_sort_value(row[name]) for name in resource.natural_key)

    async def list_records(self, resource):
        rows = self._sorted(resource, self.tables[resource.path].values())
        return [self._hydrate(resource, r) for r in rows]

    async def get_record(self, resource, record_id):
        row = self.tables[resource.path].get(record_id)
        return self._hydrate(resource, row) if row is not None else None

    async def insert_record(self, resource, values):
        return self.seed(resource.path, **values)

    async def update_record(self, resource, record_id, values):
        row = self.tables[resource.path].get(record_id)
        if row is None:
            return None
        row.update(values)
        row["updatedAt"] = datetime.now(timezone.utc)
        return copy.deepcopy(row)

    async def delete_record(self, resource, record_id):
        return self.tables[resource.path].pop(record_id, None) is not None

    async def existing_ids(self, resource, ids):
        return {i for i in ids if i in self.tables[resource.path]}

    async def find_by_natural_keys(self, resource, records):
        keys = {self._key(resource, r) for r in records}
        rows = [r for r in self.tables[resource.path].values() if self._key(resource, r) in keys]
        return [self._hydrate(resource, r) for r in self._sorted(resource, rows)]

    async def find_by_values(self, resource, field, values):
        wanted = {_sort_value(v) for v in values}
        rows = [r for r in self.tables[resource.path].values() if _sort_value(r[field.name]) in wanted]
        return [self._hydrate(resource, r) for r in self._sorted(resource, rows)]

    async def insert_batch(self, resource, records):
        if self.fail_batch_insert:
            raise RuntimeError("could not serialize access")
        staged = copy.deepcopy(self.tables[resource.path])
        seeded = []
        for record in records:
            row = {"id": next(self._ids), **record}
            now = datetime.now(timezone.utc)
            row.update({"createdAt": now, "updatedAt": now})
            staged[row["id"]] = row
            seeded.append(row)
        self.tables[resource.path] = staged
        return [self._hydrate(resource, r) for r in self._sorted(resource, seeded)]


class FakeAdminStore:
    """In-memory stand-in for `auth.repository`."""

    def __init__(self):
        self.admins = {}
        self._ids = itertools.count(1)

    def add(self, *, email, password, name="Admin"):
        now = datetime.now(timezone.utc)
        admin_id = next(self._ids)
        self.admins[admin_id] = {
            "id": admin_id,
            "email": auth_repository.normalize_email(email),
            "name": name,
            "password": security.hash_password(password),
            "createdAt": now,
            "updatedAt": now,
        }
        return admin_id

    async def get_admin_by_email(self, email):
        wanted = auth_repository.normalize_email(email)
        for admin in self.admins.values():
            if admin["email"] == wanted:
                return dict(admin)
        return None

    async def get_admin_profile(self, admin_id):
        admin = self.admins.get(admin_id)
        if admin is None:
            return None
        return {k: admin[k] for k in ("id", "email", "name", "createdAt", "updatedAt")}

    async def create_admin(self, *, email, password_hash, name):
        now = datetime.now(timezone.utc)
        admin_id = next(self._ids)
        self.admins[admin_id] = {
            "id": admin_id,
            "email": auth_repository.normalize_email(email),
            "name": name,
            "password": password_hash,
            "createdAt": now,
            "updatedAt": now,
        }
        return {k: self.admins[admin_id][k] for k in ("id", "email", "name", "createdAt", "updatedAt")}


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def store(monkeypatch):
    fake = FakeCatalogStore()
    for name in (
        "list_records",
        "get_record",
        "insert_record",
        "update_record",
        "delete_record",
        "existing_ids",
        "find_by_natural_keys",
        "find_by_values",
        "insert_batch",
    ):
        monkeypatch.setattr(catalog_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def admins(monkeypatch):
    fake = FakeAdminStore()
    for name in ("get_admin_by_email", "get_admin_profile", "create_admin"):
        monkeypatch.setattr(auth_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_client(client, settings):
    """Client carrying a valid access cookie for admin id 1."""
    client.cookies.set("token", security.build_access_token(user_id=1, settings=settings))
    yield client


@pytest.fixture
def expired_token():
    """Factory for structurally valid tokens that expired an hour ago."""

    def _make(*, user_id, secret, token_type):
        issued_at = int(time.time()) - 3600
        payload = {"sub": str(user_id), "type": token_type, "iat": issued_at, "exp": issued_at + 60}
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


def set_cookie_headers(response):
    return response.headers.get_list("set-cookie")


@pytest.fixture
def cookie_headers():
    return set_cookie_headers
