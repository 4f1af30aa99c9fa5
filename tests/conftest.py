"""
Shared pytest fixtures for ReadRover tests.

This module provides test fixtures for:
- In-memory SQLite database with all tables
- Test data factories for users, books and activities
- An HTTP test client with header-based identity
"""

import pytest
import os
import sys
from typing import Dict, Any

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def db_tables():
    """
    Create an in-memory SQLite database with all tables.

    This fixture provides a fresh database for each test, ensuring
    test isolation.
    """
    from readrover.models import setup_database

    tables = setup_database(memory=True)

    yield tables

    # Cleanup is automatic with in-memory DB


@pytest.fixture
def db_with_users(db_tables, factory):
    """Database with three users, alice, bob and carol, and no friendships."""
    users = {
        name: factory.create_user(db_tables, username=name)
        for name in ('alice', 'bob', 'carol')
    }
    return db_tables, users


@pytest.fixture
def db_with_friends(db_with_users):
    """Database where alice and bob are friends and carol is a stranger."""
    from readrover.services import add_friend

    db_tables, users = db_with_users
    add_friend(db_tables, users['alice'].id, users['bob'].id)
    return db_tables, users


@pytest.fixture
def db_with_activity(db_with_users, factory):
    """Database where alice has started reading a book, with no friends yet."""
    db_tables, users = db_with_users
    book, activity = factory.create_activity(db_tables, users['alice'])
    return db_tables, users, book, activity


# ============================================================================
# Test Data Factories
# ============================================================================

class TestDataFactory:
    """Factory for creating test data through the services."""

    @staticmethod
    def create_user(db_tables: Dict[str, Any], username: str = None, **kwargs):
        """Create and store a test user."""
        from readrover.services import create_user
        import secrets

        username = username or f"reader{secrets.token_hex(3)}"
        return create_user(
            db_tables,
            username=username,
            email=kwargs.get('email', f"{username}@example.com"),
            bio=kwargs.get('bio', ''),
            profile_picture=kwargs.get('profile_picture', ''),
        )

    @staticmethod
    def create_book(db_tables: Dict[str, Any], owner, title: str = None, **kwargs):
        """Add a test book to a user's shelf."""
        from readrover.services import add_book
        import secrets

        return add_book(
            db_tables,
            owner.id,
            title=title or f"Test Book {secrets.token_hex(3)}",
            authors=kwargs.get('authors', 'Test Author'),
            page_count=kwargs.get('page_count', 300),
        )

    @classmethod
    def create_activity(cls, db_tables: Dict[str, Any], owner, title: str = None):
        """Add a book for the user and start reading it; returns (book, activity)."""
        from readrover.services import start_reading

        book = cls.create_book(db_tables, owner, title=title)
        return start_reading(db_tables, owner.id, book.id)


@pytest.fixture
def factory():
    """Provide access to the test data factory."""
    return TestDataFactory()


# ============================================================================
# HTTP Fixtures
# ============================================================================

def header_identity(req, sess):
    """Identity for tests: the acting user comes from the X-User-Id header."""
    user_id = req.headers.get('x-user-id')
    return int(user_id) if user_id else None


@pytest.fixture
def client(db_tables):
    """Starlette test client over an app bound to the test database."""
    from starlette.testclient import TestClient
    from app import create_app

    app = create_app(db_tables=db_tables, identity=header_identity)
    return TestClient(app)


def as_user(user) -> Dict[str, str]:
    """Request headers that act as the given user."""
    return {'X-User-Id': str(user.id)}


@pytest.fixture
def headers():
    return as_user


# ============================================================================
# Environment Variable Fixtures
# ============================================================================

@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    monkeypatch.setenv('READROVER_DB_PATH', 'data/test.db')
    monkeypatch.setenv('READROVER_MIGRATIONS_DIR', 'migrations')
    monkeypatch.setenv('READROVER_FEED_LIMIT', '5')
    monkeypatch.setenv('READROVER_SECRET_KEY', 'test-secret')
    monkeypatch.setenv('PORT', '8080')
    monkeypatch.setenv('LOG_LEVEL', 'debug')
    yield
