"""Shared fixtures: a throwaway SQLite database, seeded portal data, an ASGI
client, signed access tokens, and in-memory stand-ins for the auth admin API,
object storage, and the mail relay."""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

_DB_DIR = tempfile.mkdtemp(prefix="partners_hub_tests_")

# Must be set before partners_hub is imported: settings and the engine are module-level
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["APP_ENV"] = "test"
os.environ["AUDIT_ENABLED"] = "false"
os.environ["SITE_URL"] = "https://partners.example.com"
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-that-is-at-least-32-bytes"
os.environ["SMTP_HOST"] = "smtp.test.local"
os.environ["SMTP_FROM"] = "orders@qiqiglobal.com"
os.environ["AZURE_TENANT_ID"] = "tenant"
os.environ["AZURE_CLIENT_ID"] = "client"
os.environ["AZURE_CLIENT_SECRET"] = "secret"

import httpx  # noqa: E402
import jwt  # noqa: E402
import pytest  # noqa: E402

from partners_hub.core.config import settings  # noqa: E402
from partners_hub.core.exceptions import BadRequestError, UpstreamServiceError  # noqa: E402
from partners_hub.db.base import Base, async_session_factory, engine  # noqa: E402
from partners_hub.domain import (  # noqa: E402
    Admin,
    Category,
    Client,
    Company,
    CompanyClass,
    Product,
    SupportFundLevel,
)
from partners_hub.main import app  # noqa: E402
from partners_hub.services import email_service  # noqa: E402
from partners_hub.services.auth_admin import get_auth_admin  # noqa: E402
from partners_hub.services.storage import get_storage  # noqa: E402


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections are bound to this test's event loop
    await engine.dispose()


@pytest.fixture
async def session(database):
    async with async_session_factory() as s:
        yield s


@pytest.fixture
async def seed(database):
    """Two companies (Americas 5% / International 10%), their users, and a small catalog."""
    async with async_session_factory() as s:
        americas = CompanyClass(name="Americas")
        international = CompanyClass(name="International - EU")
        five = SupportFundLevel(name="Silver", percent=Decimal("5"))
        ten = SupportFundLevel(name="Gold", percent=Decimal("10"))
        snacks = Category(name="Snacks", sort_order=1)
        drinks = Category(name="Drinks", sort_order=2)
        s.add_all([americas, international, five, ten, snacks, drinks])
        await s.flush()

        us_co = Company(
            company_name="Acme Foods",
            company_email="billing@acme.test",
            ship_to_contact_email="dock@acme.test",
            class_id=americas.id,
            support_fund_level_id=five.id,
        )
        eu_co = Company(
            company_name="Euro Imports",
            company_email="info@euro.test",
            class_id=international.id,
            support_fund_level_id=ten.id,
        )
        bare_co = Company(company_name="No Contact Ltd")
        s.add_all([us_co, eu_co, bare_co])
        await s.flush()

        admin = Admin(id=str(uuid.uuid4()), name="Ada Admin", email="ada@qiqi.test")
        us_client = Client(
            id=str(uuid.uuid4()), name="Carla Client", email="carla@acme.test", company_id=us_co.id
        )
        eu_client = Client(
            id=str(uuid.uuid4()), name="Emil Client", email="emil@euro.test", company_id=eu_co.id
        )
        disabled_client = Client(
            id=str(uuid.uuid4()),
            name="Dora Disabled",
            email="dora@acme.test",
            company_id=us_co.id,
            enabled=False,
        )
        s.add_all([admin, us_client, eu_client, disabled_client])

        chips = Product(
            sku="CHIP-01", item_name="Chili Chips", category_id=snacks.id,
            price_americas=Decimal("4.00"), price_international=Decimal("5.00"),
            case_pack=6, list_in_support_funds=True,
        )
        tea = Product(
            sku="TEA-01", item_name="Green Tea", category_id=drinks.id,
            price_americas=Decimal("10.00"), price_international=Decimal("12.50"),
            case_pack=12,
        )
        eu_only = Product(
            sku="EU-01", item_name="Euro Biscuits", category_id=snacks.id,
            price_americas=Decimal("3.00"), price_international=Decimal("3.50"),
            case_pack=10, visible_to_americas=False, list_in_support_funds=True,
        )
        retired = Product(
            sku="OLD-01", item_name="Old Crackers", category_id=snacks.id,
            price_americas=Decimal("2.00"), price_international=Decimal("2.00"),
            case_pack=4, enable=False, list_in_support_funds=True,
        )
        s.add_all([chips, tea, eu_only, retired])
        await s.commit()

        return SimpleNamespace(
            us_company=us_co,
            eu_company=eu_co,
            bare_company=bare_co,
            admin=admin,
            us_client=us_client,
            eu_client=eu_client,
            disabled_client=disabled_client,
            chips=chips,
            tea=tea,
            eu_only=eu_only,
            retired=retired,
        )


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def make_token(user_id: str, *, expires_in: int = 3600, secret: str | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "aud": settings.supabase_jwt_audience,
        "role": "authenticated",
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret or settings.supabase_jwt_secret, algorithm="HS256")


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def token_for():
    return make_token


@pytest.fixture
def admin_headers(seed):
    return auth_headers(seed.admin.id)


@pytest.fixture
def us_headers(seed):
    return auth_headers(seed.us_client.id)


@pytest.fixture
def eu_headers(seed):
    return auth_headers(seed.eu_client.id)


# ---------------------------------------------------------------------------
# External services
# ---------------------------------------------------------------------------

class FakeAuthAdmin:
    def __init__(self):
        self.users: dict[str, dict] = {}
        self.deleted: list[str] = []
        self.links: list[tuple[str, str]] = []
        self.fail_link = False
        self.fail_delete = False

    async def create_user(self, email, password, full_name):
        if any(u["email"] == email for u in self.users.values()):
            raise BadRequestError("A user with this email already exists. Please use a different email.")
        user_id = str(uuid.uuid4())
        self.users[user_id] = {"email": email, "password": password, "full_name": full_name}
        return user_id

    async def delete_user(self, user_id):
        if self.fail_delete:
            raise UpstreamServiceError("Failed to delete auth user: boom")
        self.users.pop(user_id, None)
        self.deleted.append(user_id)

    async def generate_recovery_link(self, email, redirect_to):
        if self.fail_link:
            raise UpstreamServiceError("Failed to generate recovery link: boom")
        self.links.append((email, redirect_to))
        return f"https://project.supabase.test/auth/v1/verify?token=abc&redirect_to={redirect_to}"


class FakeStorage:
    base_url = "https://project.supabase.test"

    def __init__(self):
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}

    async def upload(self, bucket, path, content, content_type="application/octet-stream", *, upsert=False):
        self.objects[(bucket, path)] = (content, content_type)
        return path

    def public_url(self, bucket, path):
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"

    async def create_signed_url(self, bucket, path, expires_in=3600):
        return f"{self.base_url}/storage/v1/object/sign/{bucket}/{path}?token=signed"

    async def remove(self, bucket, paths):
        for path in paths:
            self.objects.pop((bucket, path), None)


@pytest.fixture
def outbox(monkeypatch):
    """Every message handed to the relay, in order."""
    sent: list[dict] = []

    async def fake_send_mail(to, subject, html, text=None, attachments=(), reply_to=None):
        sent.append(
            {
                "to": to,
                "subject": subject,
                "html": html,
                "attachments": list(attachments),
                "reply_to": reply_to,
            }
        )
        return f"<{len(sent)}@test>"

    monkeypatch.setattr(email_service, "send_mail", fake_send_mail)
    return sent


@pytest.fixture
def auth_admin():
    return FakeAuthAdmin()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
async def client(database, outbox, auth_admin, storage):
    app.dependency_overrides[get_auth_admin] = lambda: auth_admin
    app.dependency_overrides[get_storage] = lambda: storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
