"""
PIVTOOLS Site Test Configuration and Shared Fixtures

Provides application clients for both header policies and a disposable
copy of the content tree for tests that need to break content files.

Example usage:
    def test_home(prod_client):
        assert prod_client.get("/").status_code == 200
"""

import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import SiteSettings
from core.content import set_content_dir

CONTENT_ROOT = Path(__file__).parent.parent / "content"


@pytest.fixture
def prod_settings():
    """Production policy without the HTTPS redirect (TestClient speaks plain http)."""
    return SiteSettings(environment="production", force_https=False, content_dir=CONTENT_ROOT)


@pytest.fixture
def dev_settings():
    return SiteSettings(environment="development", force_https=False, content_dir=CONTENT_ROOT)


@pytest.fixture
def prod_app(prod_settings):
    return create_app(prod_settings)


@pytest.fixture
def prod_client(prod_app):
    """
    Client for the production header policy.

    Returns:
        TestClient: Client that does not follow redirects
    """
    with TestClient(prod_app, follow_redirects=False) as client:
        yield client


@pytest.fixture
def dev_client(dev_settings):
    with TestClient(create_app(dev_settings), follow_redirects=False) as client:
        yield client


@pytest.fixture
def content_copy(tmp_path):
    """
    Writable copy of the content tree, made active for the test.

    The registry is pointed back at the configured content root afterwards.
    """
    root = tmp_path / "content"
    shutil.copytree(CONTENT_ROOT, root)
    set_content_dir(root)
    yield root
    set_content_dir(CONTENT_ROOT)
