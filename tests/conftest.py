"""Shared pytest fixtures for the console tests."""

from datetime import timedelta
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.utils import timezone

from businesses.models import Business
from verifications.models import Credential

_sequence = count(1)


@pytest.fixture
def reviewer(db):
    return get_user_model().objects.create_user(username="rev-1", password="pw", is_staff=True)


@pytest.fixture
def second_reviewer(db):
    user = get_user_model().objects.create_user(username="rev-2", password="pw")
    group, _ = Group.objects.get_or_create(name="reviewers")
    user.groups.add(group)
    return user


@pytest.fixture
def outsider(db):
    """A signed-in account without the reviewer role."""
    return get_user_model().objects.create_user(username="outsider", password="pw")


@pytest.fixture
def make_business(db):
    def factory(**fields):
        n = next(_sequence)
        fields.setdefault("name", f"Business {n}")
        fields.setdefault("email", f"owner{n}@example.com")
        return Business.objects.create(**fields)
    return factory


@pytest.fixture
def business(make_business):
    return make_business(name="Acme Plumbing", email="hello@acme.test", city="Austin")


@pytest.fixture
def make_credential(db, business):
    def factory(owner=None, status=Credential.Status.PENDING, reviewer=None, **fields):
        fields.setdefault("credential_type", Credential.Type.BUSINESS_LICENSE)
        fields.setdefault("credential_number", f"LIC-{next(_sequence):05d}")
        fields.setdefault("created_at", timezone.now() - timedelta(days=1))
        if status != Credential.Status.PENDING:
            fields.setdefault("verified_at", fields["created_at"] + timedelta(minutes=5))
            fields["verified_by"] = reviewer
        return Credential.objects.create(business=owner or business, verification_status=status, **fields)
    return factory


def _failing_update_for(model, monkeypatch):
    original_update = QuerySet.update

    def update(self, **kwargs):
        if self.model is model:
            raise DatabaseError(f"{model._meta.db_table} is unavailable")
        return original_update(self, **kwargs)

    monkeypatch.setattr(QuerySet, "update", update)


@pytest.fixture
def business_writes_fail(monkeypatch):
    _failing_update_for(Business, monkeypatch)


@pytest.fixture
def credential_writes_fail(monkeypatch):
    _failing_update_for(Credential, monkeypatch)
