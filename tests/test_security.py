import asyncio

import pytest
from starlette.requests import Request

from kreit.core.security import extract_access_token, parse_cookie_token, resolve_caller
from kreit.data.base import CallerIdentity
from kreit.data.store import MemoryStore


def _request(headers=None):
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "POST", "path": "/", "headers": raw})


class TestParseCookieToken:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank(self, value):
        assert parse_cookie_token(value) is None

    def test_raw_value_trimmed(self):
        assert parse_cookie_token("  abc.def  ") == "abc.def"

    def test_json_session(self):
        assert parse_cookie_token('{"access_token": "jwt-1", "refresh_token": "r"}') == "jwt-1"

    def test_json_without_access_token_returns_raw(self):
        assert parse_cookie_token('{"foo": 1}') == '{"foo": 1}'

    def test_broken_json_returns_raw(self):
        assert parse_cookie_token("{not json") == "{not json"


class TestExtractAccessToken:
    def test_bearer_header(self):
        assert extract_access_token(_request({"Authorization": "Bearer jwt-1"})) == "jwt-1"

    def test_bearer_is_case_insensitive(self):
        assert extract_access_token(_request({"Authorization": "bearer jwt-1"})) == "jwt-1"

    def test_bearer_wins_over_cookie(self):
        req = _request({"Authorization": "Bearer header", "Cookie": "sb-access-token=cookie"})
        assert extract_access_token(req) == "header"

    def test_cookie_priority(self):
        req = _request({"Cookie": "supabase-auth-token=third; supabase-access-token=second"})
        assert extract_access_token(req) == "second"

    def test_non_bearer_header_ignored(self):
        assert extract_access_token(_request({"Authorization": "Basic abc"})) is None

    def test_nothing(self):
        assert extract_access_token(_request()) is None


class TestResolveCaller:
    def setup_method(self):
        self.store = MemoryStore()
        self.store.sessions["t1"] = CallerIdentity(user_id="u1")
        self.store.premium_users.add("u1")
        self.store.sessions["t2"] = CallerIdentity(user_id="u2")

    def _resolve(self, headers=None):
        return asyncio.run(resolve_caller(_request(headers), self.store))

    def test_anonymous(self):
        caller = self._resolve()
        assert caller.user_id is None
        assert caller.premium is False

    def test_premium_user(self):
        caller = self._resolve({"Authorization": "Bearer t1"})
        assert caller.user_id == "u1"
        assert caller.premium is True

    def test_free_user(self):
        caller = self._resolve({"Authorization": "Bearer t2"})
        assert caller.user_id == "u2"
        assert caller.premium is False

    def test_unknown_token(self):
        assert self._resolve({"Authorization": "Bearer zzz"}).user_id is None
