import itertools

import pytest
from django.apps import apps
from django.core.cache import cache
from rest_framework.test import APIClient

from feedback.models import Feedback
from users.models import Account

PASSWORD = "Campus-Pass-2024"


@pytest.fixture(autouse=True)
def clear_cache():
    # Throttle counters and cached stats live in the cache.
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture()
def make_account(db):
    counter = itertools.count(1)

    def _make(role=Account.ROLE_STUDENT, password=PASSWORD, **extra):
        n = next(counter)
        extra.setdefault("student_id", f"2024{n:06d}")
        extra.setdefault("email", f"user{n}@example.edu")
        extra.setdefault("name", f"User {n}")
        return Account.objects.create_user(password=password, role=role, **extra)

    return _make


@pytest.fixture()
def student(make_account) -> Account:
    return make_account(name="Ada Student")


@pytest.fixture()
def other_student(make_account) -> Account:
    return make_account(name="Bob Student")


@pytest.fixture()
def admin_account(make_account) -> Account:
    return make_account(role=Account.ROLE_ADMIN, name="Desk Admin")


def client_for(account) -> APIClient:
    token = apps.get_app_config("users").token_issuer.issue(account)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture()
def student_client(student) -> APIClient:
    return client_for(student)


@pytest.fixture()
def other_client(other_student) -> APIClient:
    return client_for(other_student)


@pytest.fixture()
def admin_client(admin_account) -> APIClient:
    return client_for(admin_account)


@pytest.fixture()
def make_ticket(student):
    def _make(owner=None, **fields):
        fields.setdefault("category", Feedback.CATEGORY_ACADEMIC)
        fields.setdefault("title", "Library hours")
        fields.setdefault("content", "Please keep the library open later during exams.")
        return Feedback.objects.create_ticket(owner=owner or student, **fields)

    return _make


@pytest.fixture()
def login_as():
    return client_for
