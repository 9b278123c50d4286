"""
Shared fixtures: isolated settings, wired services and an HTTP client
"""
import pytest
from fastapi.testclient import TestClient

from applypdf.config import Settings
from applypdf.core.container import build_container
from applypdf.main import create_app
from applypdf.schemas import UploadedFile

from tests.helpers import ADA_DESCRIPTION, TWO_MB, make_pdf_bytes


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        STORAGE_DIR=str(tmp_path / "storage"),
        ENVIRONMENT="test",
        DEBUG=False,
    )


@pytest.fixture
def container(settings):
    services = build_container(settings)
    yield services
    services.close()


@pytest.fixture
def service(container):
    return container.application_service


@pytest.fixture
def storage(container):
    return container.storage


@pytest.fixture
def client(settings, container):
    app = create_app(settings, container=container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def ada_form():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "job_description": ADA_DESCRIPTION,
    }


@pytest.fixture
def resume_file():
    return UploadedFile(
        content=make_pdf_bytes(TWO_MB),
        original_name="resume.pdf",
        mime_type="application/pdf",
    )
