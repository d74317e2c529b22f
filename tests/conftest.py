"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from clients.pet import Pet, PetStatus


def make_session(status=200, text="", error=None):
    """
    Build a mock aiohttp session for patching ClientSession.

    Returns a (session_factory_return_value, session) tuple; assign the first
    to the patched ClientSession's return_value and inspect the second's
    request calls.
    """
    mock_resp = AsyncMock()
    mock_resp.status = status
    mock_resp.text = AsyncMock(return_value=text)

    mock_session = AsyncMock()
    if error is not None:
        mock_session.request = MagicMock(side_effect=error)
    else:
        mock_session.request = MagicMock(
            return_value=AsyncMock(
                __aenter__=AsyncMock(return_value=mock_resp),
                __aexit__=AsyncMock(return_value=False),
            )
        )

    factory_value = AsyncMock(
        __aenter__=AsyncMock(return_value=mock_session),
        __aexit__=AsyncMock(return_value=False),
    )
    return factory_value, mock_session


@pytest.fixture
def pet_spec():
    """Desired pet spec as stored on a resource."""
    return {
        "name": "rex",
        "category": {"id": 1, "name": "dogs"},
        "tags": [{"id": 1, "name": "good"}, {"id": 2, "name": "fluffy"}],
        "photoUrls": ["http://img/rex-1.png", "http://img/rex-2.png"],
    }


@pytest.fixture
def sample_resource(pet_spec):
    """Sample Pet resource data for testing."""
    return {
        "id": 1,
        "name": "rex",
        "resource_type_name": "Pet",
        "resource_type_version": "v1alpha1",
        "spec": pet_spec,
        "plugin_config": {},
        "metadata": {"annotations": {"petstore.io/external-name": "565656"}},
        "outputs": {},
        "status": "pending",
        "status_message": None,
        "generation": 2,
        "observed_generation": 1,
        "retry_count": 0,
        "last_reconcile_time": "2026-01-01T00:00:00Z",
        "next_reconcile_time": None,
    }


@pytest.fixture
def observed_pet():
    """A stored pet matching pet_spec."""
    return Pet.model_validate(
        {
            "id": 565656,
            "name": "rex",
            "category": {"id": 1, "name": "dogs"},
            "tags": [{"id": 2, "name": "fluffy"}, {"id": 1, "name": "good"}],
            "photoUrls": ["http://img/rex-2.png", "http://img/rex-1.png"],
            "status": PetStatus.AVAILABLE.value,
        }
    )
