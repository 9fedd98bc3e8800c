import os
import tempfile

# Set environment variables BEFORE any imports that might use settings
# Use a temporary directory for test database to avoid permission issues
_test_db_dir = tempfile.mkdtemp()
_test_db_path = os.path.join(_test_db_dir, "test_escrow_rental.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_test_db_path}"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-characters-long-for-testing"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["ADMIN_ADDRESS"] = "0xadmin"

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from escrow_rental.main import app
from escrow_rental.core.config import settings
from escrow_rental.core.security import create_access_token
from escrow_rental.db.base import enable_sqlite_savepoints
from escrow_rental.db.transaction import atomic
from escrow_rental.services.asset_issuer import DatabaseAssetIssuer
from escrow_rental.services.escrow_ledger import DatabaseEscrowLedger
from escrow_rental.services.identity import submit_identity

SELLER = "0xseller"
BUYER = "0xbuyer"
STRANGER = "0xstranger"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test and run migrations."""
    # Use a temporary file for SQLite database
    temp_db_dir = tempfile.mkdtemp()
    test_db_path = os.path.join(temp_db_dir, "test.db")
    test_db_url = f"sqlite:///{test_db_path}"

    # Create test engine and session with proper SQLite settings
    test_engine = create_engine(
        test_db_url,
        connect_args={"check_same_thread": False},
    )

    # Enable WAL mode to reduce locking issues
    @event.listens_for(test_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    enable_sqlite_savepoints(test_engine)

    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    # Run Alembic migrations to set up the database schema and seed data
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", test_db_url)
    command.upgrade(alembic_cfg, "head")

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        # Dispose the engine to close all connections
        test_engine.dispose()

        # Clean up - remove test database file and directory
        for suffix in ["", "-wal", "-shm"]:
            path = f"{test_db_path}{suffix}"
            if os.path.exists(path):
                os.remove(path)
        if os.path.exists(temp_db_dir):
            os.rmdir(temp_db_dir)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    from escrow_rental.api.deps import get_db

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session to match test naming conventions."""
    return db_session


@pytest.fixture(scope="function")
def ledger(db: Session) -> DatabaseEscrowLedger:
    return DatabaseEscrowLedger(db)


@pytest.fixture(scope="function")
def issuer(db: Session) -> DatabaseAssetIssuer:
    return DatabaseAssetIssuer(db)


@pytest.fixture(scope="function")
def admin() -> str:
    return settings.admin_address


def auth_headers(principal: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(principal)}"}


@pytest.fixture(scope="function")
def fund(db: Session):
    """Credit an account outside of any marketplace operation."""

    def _fund(holder: str, amount: int) -> None:
        with atomic(db):
            DatabaseEscrowLedger(db).credit(holder, amount)

    return _fund


@pytest.fixture(scope="function")
def headers_for():
    """Build bearer headers for any principal."""
    return auth_headers


@pytest.fixture(scope="function")
def seller(db: Session) -> str:
    """A self-verified seller."""
    submit_identity(db, SELLER)
    return SELLER


@pytest.fixture(scope="function")
def buyer(db: Session, fund) -> str:
    """A self-verified buyer with 1000 in their account."""
    submit_identity(db, BUYER)
    fund(BUYER, 1000)
    return BUYER


@pytest.fixture(scope="function")
def admin_headers(admin: str) -> dict:
    return auth_headers(admin)


@pytest.fixture(scope="function")
def seller_headers(seller: str) -> dict:
    return auth_headers(seller)


@pytest.fixture(scope="function")
def buyer_headers(buyer: str) -> dict:
    return auth_headers(buyer)
