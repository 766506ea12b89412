import json

import pytest
from fastapi import Response

from conftest import user_payload
from transport_billing.core.exceptions import StorageError
from transport_billing.db.storage import JsonFileStore, MemoryStore
from transport_billing.schemas.user import User
from transport_billing.services.token_store import (
    CookieTokenAdapter,
    DualTokenStore,
    LocalStorageTokenAdapter,
    RememberedLogin,
    UserCache,
)


class BrokenTokenStore:
    def get_token(self):
        return None

    def set_token(self, token):
        raise OSError("disk full")

    def remove_token(self):
        raise OSError("disk full")


def rendered(**kwargs):
    response = Response()
    response.set_cookie(**kwargs)
    return response.headers["set-cookie"]


def test_cookie_attributes():
    cookies = CookieTokenAdapter(secure=True, max_age_days=7, clock=lambda: 0)
    cookies.set_token("abc")

    header = rendered(**cookies.set_cookie_kwargs())
    assert header.startswith("auth_token=abc")
    assert "Max-Age=604800" in header
    assert "Path=/" in header
    assert "samesite=strict" in header.lower()
    assert "Secure" in header
    assert "HttpOnly" not in header
    assert "Thu, 08 Jan 1970" in header


def test_cookie_not_secure_over_http():
    cookies = CookieTokenAdapter(secure=False)
    cookies.set_token("abc")
    assert "Secure" not in rendered(**cookies.set_cookie_kwargs())


def test_cookie_removal_is_a_delete():
    cookies = CookieTokenAdapter()
    cookies.set_token("abc")
    cookies.remove_token()

    assert cookies.get_token() is None
    assert cookies.removed

    response = Response()
    response.delete_cookie(**cookies.delete_cookie_kwargs())
    header = response.headers["set-cookie"]
    assert header.startswith('auth_token=""')
    assert "Max-Age=0" in header
    assert "samesite=strict" in header.lower()


def test_cookie_adapter_starts_from_browser_value():
    cookies = CookieTokenAdapter(value="from-browser")
    assert cookies.get_token() == "from-browser"
    assert not cookies.removed


def test_dual_store_writes_both_copies():
    store = MemoryStore()
    cookies = CookieTokenAdapter()
    tokens = DualTokenStore(LocalStorageTokenAdapter(store), cookies)

    tokens.set_token("abc")
    assert store.get("auth_token") == "abc"
    assert cookies.get_token() == "abc"

    tokens.remove_token()
    assert store.get("auth_token") is None
    assert cookies.get_token() is None
    assert tokens.get_token() is None


def test_dual_store_falls_back_to_mirror():
    cookies = CookieTokenAdapter()
    cookies.set_token("only-cookie")
    tokens = DualTokenStore(LocalStorageTokenAdapter(MemoryStore()), cookies)
    assert tokens.get_token() == "only-cookie"


def test_dual_store_rolls_back_when_mirror_fails():
    store = MemoryStore({"auth_token": "old"})
    tokens = DualTokenStore(LocalStorageTokenAdapter(store), BrokenTokenStore())

    with pytest.raises(StorageError):
        tokens.set_token("new")
    assert store.get("auth_token") == "old"

    empty = MemoryStore()
    with pytest.raises(StorageError):
        DualTokenStore(LocalStorageTokenAdapter(empty), BrokenTokenStore()).set_token("new")
    assert empty.get("auth_token") is None


def test_dual_store_remove_attempts_both():
    store = MemoryStore({"auth_token": "abc"})
    tokens = DualTokenStore(LocalStorageTokenAdapter(store), BrokenTokenStore())

    with pytest.raises(StorageError):
        tokens.remove_token()
    assert store.get("auth_token") is None


def test_user_cache_round_trip():
    store = MemoryStore()
    cache = UserCache(store)
    user = User.model_validate(user_payload())

    cache.replace(user, 1234)
    assert cache.get_user() == user
    assert cache.get_timestamp() == 1234
    assert json.loads(store.get("user_data"))["profile"]["ownerName"] == "Ravi Kumar"

    cache.clear()
    assert cache.get_user() is None
    assert cache.get_timestamp() is None


def test_user_cache_tolerates_garbage():
    cache = UserCache(MemoryStore({"user_data": "{not json", "user_data_timestamp": "soon"}))
    assert cache.get_user() is None
    assert cache.get_timestamp() is None


def test_remembered_login_never_stores_password():
    store = MemoryStore()
    remembered = RememberedLogin(store)

    remembered.save("owner@example.com", True)
    assert remembered.load() == {"email": "owner@example.com", "remember_me": True}
    assert all("password" not in key.lower() for key in store.keys())

    remembered.save("owner@example.com", False)
    assert remembered.load() == {"email": None, "remember_me": False}
    assert store.keys() == []


def test_json_file_store_persists(tmp_path):
    path = tmp_path / "state" / "storage.json"
    store = JsonFileStore(path)
    store.set("auth_token", "abc")
    store.set("rememberMe", "true")
    store.remove("rememberMe")

    reopened = JsonFileStore(path)
    assert reopened.get("auth_token") == "abc"
    assert reopened.get("rememberMe") is None


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("[1, 2", encoding="utf-8")
    assert JsonFileStore(path).keys() == []
