import pytest
import sys
import os
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import uuid

# Settings read at import time by config.py
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPABASE_URL", "https://identity.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")

# Add the parent directory to sys.path to allow imports from startup_hub
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from startup_hub.auth.security import AuthContext, UserRole, create_access_token
from startup_hub.database.base import Base, get_db
from startup_hub.models import Startup, Submission, OwnershipClaim
from startup_hub.utils.identity_admin import get_identity_admin
from startup_hub.utils.s3_storage import logo_storage_factory, pitch_deck_storage_factory

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    # Enable foreign key constraints
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

LONG_DESCRIPTION = (
    "We build software that helps small producers in the region reach new markets, "
    "manage their inventory and get paid faster."
)


class FakeStorage:
    """Stands in for S3ObjectStorage; records uploads in memory"""

    def __init__(self, bucket_name, public):
        self.bucket_name = bucket_name
        self.public = public
        self.objects = {}
        self.fail_uploads = False
        self.presigned = []

    def upload_bytes(self, data, s3_key, content_type, metadata=None):
        if self.fail_uploads:
            return {'success': False, 'error': 'storage unavailable'}
        self.objects[s3_key] = {'data': data, 'content_type': content_type, 'metadata': metadata}
        return {
            'success': True,
            'bucket': self.bucket_name,
            's3_key': s3_key,
            's3_url': f"https://{self.bucket_name}.storage.test/{s3_key}" if self.public else None,
            'content_type': content_type,
            'file_size': str(len(data)),
        }

    def generate_presigned_url(self, s3_key, expiration=3600):
        self.presigned.append((s3_key, expiration))
        return f"https://{self.bucket_name}.storage.test/{s3_key}?expires={expiration}"


class FakeIdentityAdmin:
    """Stands in for IdentityAdminClient with an in-memory user table"""

    def __init__(self):
        self.users = {}

    def add_user(self, user_id, email, role=None, full_name=None, company=None):
        metadata = {}
        if role:
            metadata["role"] = role
        if full_name:
            metadata["full_name"] = full_name
        if company:
            metadata["company"] = company
        self.users[str(user_id)] = {
            "id": str(user_id),
            "email": email,
            "user_metadata": metadata,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        return self.users[str(user_id)]

    def list_users(self, page=1, per_page=1000):
        return list(self.users.values())

    def get_user(self, user_id):
        return self.users.get(str(user_id))

    def update_user_metadata(self, user_id, metadata):
        user = self.users.get(str(user_id))
        if user is None:
            return None
        user["user_metadata"] = {**user["user_metadata"], **metadata}
        return user

    def delete_user(self, user_id):
        return self.users.pop(str(user_id), None) is not None


@pytest.fixture(scope="function")
def db():
    # Create the database tables
    Base.metadata.create_all(bind=engine)

    # Create a new database session for each test
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop all tables after the test is complete
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def logo_storage():
    return FakeStorage("startup-logos", public=True)


@pytest.fixture
def pitch_deck_storage():
    return FakeStorage("pitch-decks", public=False)


@pytest.fixture
def identity():
    return FakeIdentityAdmin()


@pytest.fixture(scope="function")
def client(db, logo_storage, pitch_deck_storage, identity):
    # Import here so the environment above is in place first
    from main import app

    # Override the get_db dependency to use our test database
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[logo_storage_factory] = lambda: lambda: logo_storage
    app.dependency_overrides[pitch_deck_storage_factory] = lambda: lambda: pitch_deck_storage
    app.dependency_overrides[get_identity_admin] = lambda: identity

    # Create test client
    with TestClient(app) as test_client:
        yield test_client

    # Reset dependency overrides after test
    app.dependency_overrides = {}


def unreachable_storage():
    raise ConnectionError("could not reach bucket")


@pytest.fixture
def storage_down(client):
    """Client whose buckets fail as soon as they are opened"""
    from main import app

    app.dependency_overrides[logo_storage_factory] = lambda: unreachable_storage
    app.dependency_overrides[pitch_deck_storage_factory] = lambda: unreachable_storage
    return client


class SignedInUser:
    """A signed-in caller: id, auth context and bearer headers"""

    def __init__(self, role, email=None, full_name=None):
        self.user_id = uuid.uuid4()
        self.role = role
        self.email = email or f"{role}-{self.user_id.hex[:6]}@example.com"
        self.full_name = full_name
        self.auth = AuthContext(user_id=self.user_id, email=self.email,
                                role=UserRole(role), full_name=full_name)
        token = create_access_token(self.user_id, email=self.email, role=role, full_name=full_name)
        self.headers = {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin():
    return SignedInUser("admin", full_name="Directory Admin")


@pytest.fixture
def investor():
    return SignedInUser("investor", full_name="Ana Inversora")


@pytest.fixture
def entrepreneur():
    return SignedInUser("entrepreneur", full_name="Eva Fundadora")


@pytest.fixture
def make_user():
    return SignedInUser


def submission_form(**overrides):
    """Multipart form values for a valid submission"""
    form = {
        "name": "Huerta Digital",
        "short_description": "Marketplace for local farms",
        "long_description": LONG_DESCRIPTION,
        "founded_year": "2020",
        "operating_status": "active",
        "location": "Valencia",
        "tags": '["Agritech", "E-commerce"]',
        "employee_range": "11-50",
        "website": "https://huerta.example.com",
        "email": "hola@huerta.example.com",
        "phone": "+34 600 123 456",
        "social_links": '{"linkedin": "https://linkedin.com/company/huerta", "twitter": ""}',
        "funding_received": "Pre-seed 150k",
        "submitter_email": "founder@huerta.example.com",
    }
    form.update(overrides)
    return form


_created_offset = [0]


def make_startup(db, name="Acme Analytics", **overrides):
    """Insert a startup directly; created_at increases with each call"""
    from startup_hub.utils.slug import slugify

    _created_offset[0] += 1
    values = {
        "name": name,
        "slug": slugify(name),
        "short_description": "Analytics for regional retailers",
        "long_description": LONG_DESCRIPTION,
        "founded_year": 2019,
        "operating_status": "active",
        "location": "Madrid",
        "tags": ["SaaS"],
        "employee_range": "1-10",
        "email": "contact@acme.example.com",
        "phone": "+34 911 000 000",
        "pitch_deck_url": "startups/1700000000000-acme-pitch.pdf",
        "social_links": {},
        "is_approved": True,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=_created_offset[0]),
    }
    values.update(overrides)
    startup = Startup(**values)
    db.add(startup)
    db.commit()
    db.refresh(startup)
    return startup


def make_submission(db, name="Huerta Digital", **overrides):
    from startup_hub.utils.slug import slugify

    _created_offset[0] += 1
    values = {
        "name": name,
        "slug": slugify(name),
        "short_description": "Marketplace for local farms",
        "long_description": LONG_DESCRIPTION,
        "founded_year": 2020,
        "operating_status": "active",
        "location": "Valencia",
        "tags": ["Agritech"],
        "social_links": {},
        "submitter_email": "founder@example.com",
        "status": "pending",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=_created_offset[0]),
    }
    values.update(overrides)
    submission = Submission(**values)
    db.add(submission)
    db.commit()
    db.refresh(submission)
    return submission


def make_claim(db, user_id, startup, approved=False):
    claim = OwnershipClaim(user_id=user_id, startup_id=startup.id, approved=approved)
    db.add(claim)
    db.commit()
    db.refresh(claim)
    return claim
