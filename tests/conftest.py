import os
import random
import string
import tempfile

# Configure the application before any pizza_service module reads settings
_DB_DIR = tempfile.mkdtemp(prefix="pizza-service-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["ENV_MODE"] = "development"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("DEFAULT_ADMIN_EMAIL", None)
os.environ.pop("DEFAULT_ADMIN_PASSWORD", None)

import httpx
import pytest

from pizza_service import crud
from pizza_service.core.policy import RoleAssignment
from pizza_service.database import async_session_maker, drop_db, engine, init_db
from pizza_service.main import app
from pizza_service.services.factory import MockOrderFactoryService, get_order_factory_service


def random_name() -> str:
    return "".join(random.choices(string.ascii_lowercase, k=10))


@pytest.fixture
def name():
    return random_name()


@pytest.fixture
async def database():
    await init_db()
    yield
    await drop_db()
    await engine.dispose()


@pytest.fixture
async def db(database):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def factory():
    return MockOrderFactoryService()


@pytest.fixture
async def client(database, factory):
    app.dependency_overrides[get_order_factory_service] = lambda: factory
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def bearer():
    def _bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
    return _bearer


@pytest.fixture
def create_user(database):
    """Add a user straight to the identity store, bypassing registration."""
    async def _create(roles=None, password="toomanysecrets"):
        user_name = random_name()
        if roles is None:
            roles = [RoleAssignment.diner()]
        async with async_session_maker() as session:
            user = await crud.create_user(
                session, user_name, f"{user_name}@jwt.com", password, roles
            )
        return {"id": user.id, "name": user.name, "email": user.email, "password": password}
    return _create


@pytest.fixture
def login(client):
    async def _login(user) -> str:
        res = await client.put(
            "/api/auth", json={"email": user["email"], "password": user["password"]}
        )
        assert res.status_code == 200, res.text
        return res.json()["token"]
    return _login


@pytest.fixture
async def admin(create_user):
    return await create_user([RoleAssignment.admin()])


@pytest.fixture
async def admin_token(admin, login):
    return await login(admin)


@pytest.fixture
async def diner(create_user):
    return await create_user()


@pytest.fixture
async def diner_token(diner, login):
    return await login(diner)


@pytest.fixture
async def franchise(client, admin, admin_token, bearer):
    """A franchise administered by ``admin``."""
    res = await client.post(
        "/api/franchise",
        headers=bearer(admin_token),
        json={"name": random_name(), "admins": [{"email": admin["email"]}]},
    )
    assert res.status_code == 200, res.text
    return res.json()


@pytest.fixture
async def store(client, franchise, admin_token, bearer):
    res = await client.post(
        f"/api/franchise/{franchise['id']}/store",
        headers=bearer(admin_token),
        json={"name": random_name()},
    )
    assert res.status_code == 200, res.text
    return res.json()


@pytest.fixture
async def menu(client, admin_token, bearer):
    """Two menu items, returned as the full menu."""
    for title, price in (("Veggie", 0.0038), ("Pepperoni", 0.0042)):
        res = await client.put(
            "/api/order/menu",
            headers=bearer(admin_token),
            json={"title": title, "description": "test", "image": "pizza.png", "price": price},
        )
        assert res.status_code == 200, res.text
    return res.json()
