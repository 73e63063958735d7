import pytest
from fastapi.testclient import TestClient

from mixmodas.api import create_app
from mixmodas.config import Settings


@pytest.fixture
def test_settings(tmp_path):
    """Point the service at a throwaway database and upload directory."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        seed_sample_product=False,
        bcrypt_rounds=4,
    )


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
