# store_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from store_core.stores.models import Store


@pytest.fixture
def user(db):
    User = get_user_model()
    return User.objects.create_user(username="owner", password="testpass", is_active=True)


@pytest.fixture
def store(db, user):
    return Store.objects.create(name="Corner Coffee", code="corner-coffee", owner_user_id=user.id)


@pytest.fixture
def other_user(db):
    User = get_user_model()
    return User.objects.create_user(username="other-owner", password="testpass", is_active=True)


@pytest.fixture
def other_store(db, other_user):
    return Store.objects.create(name="Other Coffee", code="other-coffee", owner_user_id=other_user.id)


@pytest.fixture
def api_client(user, store):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def other_client(other_user, other_store):
    c = APIClient()
    c.force_authenticate(user=other_user)
    return c
