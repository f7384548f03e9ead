"""Shared fixtures for unit tests."""

from uuid import UUID, uuid4

import pytest

from tests.fakes import FakeUnitOfWork


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_email() -> str:
    return "ada@example.com"


@pytest.fixture
def other_email() -> str:
    """A second identity, distinct from user_email."""
    return "bob@example.com"


@pytest.fixture
def group_id() -> UUID:
    """A random group ID."""
    return uuid4()
