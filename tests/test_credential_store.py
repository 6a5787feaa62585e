from __future__ import annotations

import json

import pytest

from fitsync.models import UserProfile
from fitsync.services import CredentialStore

from conftest import USER


def test_save_then_load(store):
    store.save("token-abc", USER)

    assert store.load() == "token-abc"
    profile = store.load_profile()
    assert profile is not None
    assert profile.id == "user-1"
    assert profile.height_cm == 170


def test_survives_new_instance(store):
    store.save("token-abc", UserProfile.model_validate(USER))
    assert CredentialStore(store.path).load() == "token-abc"


def test_save_replaces_previous_session(store):
    store.save("first", USER)
    store.save("second", {"id": "user-2", "name": "Bob", "email": "bob@example.com"})

    assert store.load() == "second"
    assert store.load_profile().id == "user-2"


def test_empty_token_rejected(store):
    with pytest.raises(ValueError):
        store.save("", USER)


def test_clear_is_idempotent(store):
    store.save("token-abc", USER)
    store.clear()
    store.clear()

    assert store.load() is None
    assert store.load_profile() is None


def test_missing_file_means_no_session(store):
    assert store.load() is None


# ── corrupted storage fails closed ──────────────────────────────────
def test_corrupt_json_treated_as_no_session(store):
    with open(store.path, "w", encoding="utf-8") as handle:
        handle.write("{not json")
    assert store.load() is None
    assert store.load_profile() is None


def test_wrong_shape_treated_as_no_session(store):
    with open(store.path, "w", encoding="utf-8") as handle:
        json.dump(["authToken", "x"], handle)
    assert store.load() is None


def test_profile_without_token_is_ignored(store):
    with open(store.path, "w", encoding="utf-8") as handle:
        json.dump({"userData": USER}, handle)
    assert store.load_profile() is None


def test_update_profile_keeps_token(store):
    store.save("token-abc", USER)
    store.update_profile(UserProfile(id="user-1", name="Ada King", email="ada@example.com"))

    assert store.load() == "token-abc"
    assert store.load_profile().name == "Ada King"


def test_update_profile_without_session_is_noop(store):
    store.update_profile(UserProfile(id="user-1", name="Ada", email="ada@example.com"))
    assert store.load() is None
