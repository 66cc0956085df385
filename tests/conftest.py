import json
import os
import uuid

# Point the settings at a throwaway database before motoshop is imported
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SUPABASE_URL"] = "http://platform.test"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["LEGACY_LOGIN_USERNAME"] = "garage"
os.environ["LEGACY_LOGIN_PASSWORD"] = "letmein"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from motoshop.core.config import Settings
from motoshop.db.init_db import init_db
from motoshop.db.session import build_engine
from motoshop.gateway import create_backend
from motoshop.gateway.tables import TableStore
from motoshop.main import create_app
from motoshop.models.shop import MotorcycleShop

PLATFORM_URL = "http://platform.test"


class FakePlatform:
    """In-memory stand-in for the hosted platform's auth and storage endpoints."""

    def __init__(self):
        self.users = {}
        self.access_tokens = {}
        self.refresh_tokens = {}
        self.objects = {}
        self.requests = []
        self.authorizations = []
        self.fail_uploads = False
        self.fail_removals = False
        self.signup_returns_session = False

    def add_user(self, email, password, full_name=""):
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "password": password,
            "user_metadata": {"full_name": full_name},
        }
        self.users[email] = user
        return user

    def _public(self, user):
        return {"id": user["id"], "email": user["email"], "user_metadata": user["user_metadata"]}

    def _session(self, user, expires_in=3600):
        access_token = f"access-{uuid.uuid4().hex}"
        refresh_token = f"refresh-{uuid.uuid4().hex}"
        self.access_tokens[access_token] = user
        self.refresh_tokens[refresh_token] = user
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_in": expires_in,
            "token_type": "bearer",
            "user": self._public(user),
        }

    def _bearer_user(self, request):
        token = request.headers.get("Authorization", "").replace("Bearer ", "")
        return self.access_tokens.get(token)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        self.authorizations.append(request.headers.get("Authorization"))
        path = request.url.path

        if path == "/auth/v1/token":
            body = json.loads(request.content)
            grant = request.url.params.get("grant_type")
            if grant == "password":
                user = self.users.get(body["email"])
                if user is None or user["password"] != body["password"]:
                    return httpx.Response(
                        400,
                        json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
                    )
                return httpx.Response(200, json=self._session(user))
            if grant == "refresh_token":
                user = self.refresh_tokens.pop(body["refresh_token"], None)
                if user is None:
                    return httpx.Response(400, json={"error_description": "Invalid Refresh Token"})
                return httpx.Response(200, json=self._session(user))

        if path == "/auth/v1/signup":
            body = json.loads(request.content)
            if body["email"] in self.users:
                return httpx.Response(422, json={"msg": "User already registered"})
            user = self.add_user(body["email"], body["password"], body["data"].get("full_name", ""))
            if self.signup_returns_session:
                return httpx.Response(200, json=self._session(user))
            return httpx.Response(200, json=self._public(user))

        if path == "/auth/v1/logout":
            token = request.headers.get("Authorization", "").replace("Bearer ", "")
            self.access_tokens.pop(token, None)
            return httpx.Response(204)

        if path == "/auth/v1/user":
            user = self._bearer_user(request)
            if user is None:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json=self._public(user))

        if path.startswith("/storage/v1/object/authenticated/"):
            key = path[len("/storage/v1/object/authenticated/"):].split("/", 1)[1]
            if key not in self.objects:
                return httpx.Response(404, json={"message": "Object not found"})
            return httpx.Response(200, content=self.objects[key])

        if path.startswith("/storage/v1/object/"):
            rest = path[len("/storage/v1/object/"):]
            if request.method == "DELETE":
                if self.fail_removals:
                    return httpx.Response(500, json={"message": "Storage unavailable"})
                for key in json.loads(request.content)["prefixes"]:
                    self.objects.pop(key, None)
                return httpx.Response(200, json=[])
            if request.method == "POST":
                key = rest.split("/", 1)[1]
                if self.fail_uploads:
                    return httpx.Response(500, json={"message": "Storage unavailable"})
                if key in self.objects and request.headers.get("x-upsert") != "true":
                    return httpx.Response(400, json={"message": "The resource already exists"})
                self.objects[key] = request.content
                return httpx.Response(200, json={"Key": rest})

        return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def http(platform):
    client = httpx.Client(transport=httpx.MockTransport(platform.handler))
    yield client
    client.close()


@pytest.fixture
def config():
    return Settings(
        SUPABASE_URL=PLATFORM_URL,
        SUPABASE_ANON_KEY="anon-key",
        SHOPS_PAGE_SIZE=5,
    )


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite+pysqlite:///:memory:")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def tables(session_factory):
    return TableStore(session_factory)


@pytest.fixture
def backend(config, http, session_factory):
    return create_backend(config, http, session_factory)


@pytest.fixture
def rider(platform):
    return platform.add_user("rider@example.com", "secret123", "Ada Rider")


@pytest.fixture
def signed_in(backend, rider):
    """The backend with the rider signed in."""
    backend.auth.sign_in_with_password(rider["email"], rider["password"])
    return backend


@pytest.fixture
def client(config, session_factory, http):
    app = create_app(config, session_factory=session_factory, http=http)
    return TestClient(app)


def seed_shops(tables, count, **overrides):
    """Insert ``count`` shops spread over Germany (Berlin/Munich) and Italy (Milan)."""
    places = [("Germany", "Berlin"), ("Germany", "Munich"), ("Italy", "Milan")]
    rows = []
    for i in range(count):
        country, city = places[i % len(places)]
        values = {
            "name": f"Moto Shop {i:03d}",
            "country": country,
            "city": city,
            "address": f"{i} Main Street",
            "rating": 3.0 + (i % 5) * 0.5,
            "reviews_count": i,
            "place_id": f"place-{i}",
        }
        values.update(overrides)
        rows.append(tables.insert(MotorcycleShop, values))
    return rows


def motorcycle_values(**overrides):
    values = {
        "brand": "Ducati",
        "model": "Monster",
        "year": "2021",
        "mileage": "12000",
        "mileage_unit": "km",
        "engine_size": "937",
        "license_plate": "B-MS 1234",
    }
    values.update(overrides)
    return values
