"""Pytest configuration and shared fixtures."""
import pytest

import observablestate.config as config_module
from observablestate import ObservableState


@pytest.fixture(autouse=True)
def reset_config():
    """Restore library defaults around each test."""
    original_batch_mode = config_module._default_batch_mode
    original_clone = config_module._clone_function

    yield

    config_module._default_batch_mode = original_batch_mode
    config_module._clone_function = original_clone


@pytest.fixture
def published():
    """List that collects every snapshot published to a connected listener."""
    return []


@pytest.fixture
def make_state(published):
    """Factory for containers whose publications land in ``published``."""
    def _make(initial, batch_mode=False, **kwargs):
        state = ObservableState(initial, batch_mode=batch_mode, **kwargs)
        state.connect_listener(published.append)
        return state
    return _make
