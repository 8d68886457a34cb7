from __future__ import annotations

import pytest

from originate import create_app
from originate.extensions import limiter
from tests.conftest import TestConfig


class RateLimitedConfig(TestConfig):
    RATELIMIT_ENABLED = True


@pytest.fixture()
def limited_client():
    app = create_app(RateLimitedConfig)
    with app.app_context():
        limiter.reset()
        yield app.test_client()


def test_default_limit_matches_public_api():
    assert RateLimitedConfig.RATELIMIT_DEFAULT == "100 per 15 minutes"


def test_client_is_throttled_after_default_limit(limited_client):
    for _ in range(100):
        assert limited_client.get("/health").status_code == 200

    response = limited_client.get("/health")
    assert response.status_code == 429
    assert response.get_json()["error"] == "too_many_requests"
