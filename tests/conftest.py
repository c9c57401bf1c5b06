"""Shared fixtures for Finance Manager tests."""

import pytest

from finance_manager.orchestrator import FinanceService

# Lowest cost bcrypt accepts; keeps registration fast in tests
TEST_HASH_ROUNDS = 4


@pytest.fixture
def service():
    """A FinanceService with an in-memory user directory and nobody logged in."""
    return FinanceService(hash_rounds=TEST_HASH_ROUNDS)


@pytest.fixture
def alice(service):
    """Service with 'alice' registered and logged in."""
    service.register("alice", "secret1")
    service.login("alice", "secret1")
    return service


@pytest.fixture
def hash_rounds():
    """bcrypt cost for services a test builds itself."""
    return TEST_HASH_ROUNDS
