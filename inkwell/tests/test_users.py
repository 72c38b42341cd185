"""
User upserts and profile edits.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from inkwell.models.user import UserIdentity, UserPatch


def test_upsert_inserts_new_user(store):
    user = store.upsert_user(UserIdentity(id="u1", email="u1@example.com", first_name="Una"))

    assert user.id == "u1"
    assert user.email == "u1@example.com"
    assert user.created_at == user.updated_at
    assert store.get_user("u1") == user


def test_upsert_overwrites_supplied_fields_only(store):
    first = store.upsert_user(UserIdentity(id="u1", email="old@example.com", bio="Writes at night"))

    second = store.upsert_user(UserIdentity(id="u1", email="new@example.com"))

    assert second.email == "new@example.com"
    assert second.bio == "Writes at night"
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at


def test_upsert_with_taken_email_propagates(store):
    store.upsert_user(UserIdentity(id="u1", email="same@example.com"))

    with pytest.raises(IntegrityError):
        store.upsert_user(UserIdentity(id="u2", email="same@example.com"))

    assert store.get_user("u2") is None


def test_update_user(store, alice):
    updated = store.update_user(alice.id, UserPatch(bio="Poet", last_name="Liddell"))

    assert updated.bio == "Poet"
    assert updated.last_name == "Liddell"
    assert updated.email == alice.email
    assert updated.updated_at > alice.updated_at
    assert store.update_user("missing", UserPatch(bio="x")) is None


def test_display_name_fallbacks(store):
    named = store.upsert_user(UserIdentity(id="u1", first_name="Ada", last_name="Lovelace"))
    bare = store.upsert_user(UserIdentity(id="u2"))

    assert named.display_name == "Ada Lovelace"
    assert bare.display_name == "u2"
