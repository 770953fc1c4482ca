"""Tests for API key authentication and the rendered layer cache."""

from __future__ import annotations

import asyncio
import time

import pytest
from fastapi import HTTPException

import mitgliederkarte.api.auth as auth_module
from mitgliederkarte.api.cache import cached, clear_cache


class TestCache:
    def setup_method(self):
        clear_cache()

    def test_cached_returns_same_value(self):
        call_count = 0

        @cached(ttl=60)
        def render(level):
            nonlocal call_count
            call_count += 1
            return {"level": level}

        assert render("Gemeinden") == render("Gemeinden")
        assert call_count == 1

    def test_cache_expires(self):
        call_count = 0

        @cached(ttl=1)
        def short_lived():
            nonlocal call_count
            call_count += 1
            return call_count

        assert short_lived() == 1
        time.sleep(1.1)
        assert short_lived() == 2

    def test_different_levels_different_entries(self):
        @cached(ttl=60)
        def feature_count(level):
            return {"Gemeinden": 7, "Landkreise": 4}[level]

        assert feature_count("Gemeinden") == 7
        assert feature_count("Landkreise") == 4

    def test_clear_cache(self):
        calls = []

        @cached(ttl=60)
        def cached_fn():
            calls.append(1)
            return len(calls)

        assert cached_fn() == 1
        assert clear_cache() == 1
        assert cached_fn() == 2

    def test_clear_cache_on_empty_cache(self):
        assert clear_cache() == 0


class TestAuthModule:
    def test_open_mode_when_no_key_set(self, monkeypatch):
        """Without MITGLIEDERKARTE_API_KEY every request passes."""
        monkeypatch.setattr(auth_module, "API_KEY", None)
        assert asyncio.run(auth_module.verify_api_key(None)) is None

    def test_reject_wrong_key(self, monkeypatch):
        monkeypatch.setattr(auth_module, "API_KEY", "secret-key-123")
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(auth_module.verify_api_key("wrong-key"))
        assert exc_info.value.status_code == 403

    def test_reject_missing_key(self, monkeypatch):
        monkeypatch.setattr(auth_module, "API_KEY", "secret-key-123")
        with pytest.raises(HTTPException):
            asyncio.run(auth_module.verify_api_key(None))

    def test_accept_correct_key(self, monkeypatch):
        monkeypatch.setattr(auth_module, "API_KEY", "secret-key-123")
        assert asyncio.run(auth_module.verify_api_key("secret-key-123")) == "secret-key-123"
