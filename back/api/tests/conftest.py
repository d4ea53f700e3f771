import pytest
from rest_framework.test import APIClient

from tests.factories import Env


@pytest.fixture
def env():
    return Env()


@pytest.fixture
def alice(django_user_model):
    return django_user_model.objects.create_user(
        username="alice", email="alice@example.com", password="pw", first_name="Alice", last_name="Martin"
    )


@pytest.fixture
def bob(django_user_model):
    return django_user_model.objects.create_user(username="bob", email="bob@example.com", password="pw")


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def as_user():
    """ユーザーごとに認証済みの APIClient を返す。"""

    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client
