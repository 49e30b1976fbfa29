"""
Pytest fixtures for salesdesk backend tests.

Provides the application on in-memory SQLite, per-test table cleanup,
the persistence gateways, users of both roles and their auth headers.
"""

import pytest
from salesdesk import create_app
from salesdesk.extensions import db
from salesdesk.gateways import MemoryGateway, SqlAlchemyGateway, get_gateway
from salesdesk.models import User
from salesdesk.services.auth_service import hash_password

PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'PERSISTENCE_BACKEND': 'sqlalchemy',
        'GEMINI_API_KEY': None,
        'REPORT_TIMEZONE': 'UTC',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is slow on purpose; hash the shared test password once."""
    return hash_password(PASSWORD)


def make_user(session, password_hash, *, email, name, role, is_active=True) -> User:
    user = User(email=email, name=name, role=role, password_hash=password_hash, is_active=is_active)
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session, password_hash):
    return make_user(db_session, password_hash, email="admin@shop.test", name="Ada Admin", role="admin")


@pytest.fixture(scope='function')
def staff_user(db_session, password_hash):
    return make_user(db_session, password_hash, email="staff@shop.test", name="Sam Staff", role="sales_staff")


@pytest.fixture(scope='function')
def memory_gateway():
    return MemoryGateway()


@pytest.fixture(scope='function')
def sql_gateway(db_session):
    return SqlAlchemyGateway()


@pytest.fixture(params=["memory", "sqlalchemy"])
def gateway(request):
    """Core protocol tests run against both the row store and the SQL database."""
    if request.param == "memory":
        return request.getfixturevalue("memory_gateway")
    return request.getfixturevalue("sql_gateway")


@pytest.fixture(scope='function')
def app_gateway(app, db_session):
    """The gateway the running app serves requests with."""
    return get_gateway()


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.email))


@pytest.fixture(scope='function')
def staff_headers(client, staff_user):
    return auth_headers(get_auth_token(client, staff_user.email))
