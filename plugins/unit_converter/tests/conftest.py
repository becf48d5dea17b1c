import pytest

from app import create_app
from plugins.unit_converter.core.converter import Converter


@pytest.fixture
def converter() -> Converter:
    return Converter()


@pytest.fixture
def client():
    app = create_app("TestingConfig")
    return app.test_client()
