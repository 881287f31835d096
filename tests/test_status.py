"""Tests for the status-service client."""

import asyncio
import json
from unittest.mock import MagicMock

import aiohttp
import pytest

from player_watch.status import FetchError, StatusFetcher


class FakeResponse:
    def __init__(self, payload=None, status=200, body=None, exc=None):
        self.payload = payload
        self.status = status
        self.body = body
        self.exc = exc

    async def __aenter__(self):
        if self.exc is not None:
            raise self.exc
        return self

    async def __aexit__(self, *args):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=MagicMock(),
                history=(),
                status=self.status,
                message="Service Unavailable",
            )

    async def json(self, content_type="application/json"):
        if self.body is not None:
            return json.loads(self.body)
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []
        self.closed = False

    def get(self, url):
        self.urls.append(url)
        return self.response

    async def close(self):
        self.closed = True


def fetch(response, address="play.example.net"):
    session = FakeSession(response)
    fetcher = StatusFetcher("https://api.mcsrvstat.us/2/", session=session)
    return asyncio.run(fetcher.fetch(address)), session


def fetch_error(response):
    fetcher = StatusFetcher("https://api.mcsrvstat.us/2", session=FakeSession(response))
    with pytest.raises(FetchError) as excinfo:
        asyncio.run(fetcher.fetch("play.example.net"))
    return excinfo.value


def test_builds_url_from_base_and_address():
    _, session = fetch(FakeResponse({"online": False}), address="mc.example.org:25566")
    assert session.urls == ["https://api.mcsrvstat.us/2/mc.example.org:25566"]


def test_parses_online_status_with_sample():
    status, _ = fetch(FakeResponse({
        "online": True,
        "players": {"online": 3, "max": 20, "sample": [{"name": "Steve"}, {"name": "Alex"}]},
    }))
    assert status.online is True
    assert status.players.online_count == 3
    assert status.players.sample_names == ["Steve", "Alex"]


def test_parses_player_list_of_strings():
    status, _ = fetch(FakeResponse({
        "online": True,
        "players": {"online": 2, "max": 20, "list": ["Steve", "Alex"]},
    }))
    assert status.players.sample_names == ["Steve", "Alex"]


def test_names_are_optional():
    status, _ = fetch(FakeResponse({"online": True, "players": {"online": 0, "max": 20}}))
    assert status.players.online_count == 0
    assert status.players.sample_names == []


def test_offline_has_no_players():
    status, _ = fetch(FakeResponse({"online": False, "ip": "", "port": 25565}))
    assert status.online is False
    assert status.players is None


def test_online_without_players_is_not_a_fetch_error():
    status, _ = fetch(FakeResponse({"online": True}))
    assert status.online is True
    assert status.players is None


def test_transport_error_is_wrapped():
    err = fetch_error(FakeResponse(exc=aiohttp.ClientConnectionError("connection refused")))
    assert isinstance(err.__cause__, aiohttp.ClientError)


def test_timeout_is_wrapped():
    err = fetch_error(FakeResponse(exc=asyncio.TimeoutError()))
    assert "timed out" in str(err)


def test_http_error_status_is_wrapped():
    err = fetch_error(FakeResponse(status=503))
    assert isinstance(err.__cause__, aiohttp.ClientResponseError)


def test_invalid_json_is_wrapped():
    err = fetch_error(FakeResponse(body="<html>rate limited</html>"))
    assert "invalid JSON" in str(err)


@pytest.mark.parametrize(
    "payload",
    [
        {"players": {"online": 1}},
        {"online": True, "players": {"online": -1}},
        {"online": True, "players": {"online": "many"}},
        ["not", "an", "object"],
        {"online": True, "players": {"online": 3, "sample": 5}},
        {"online": True, "players": {"online": 3, "sample": True}},
        {"online": True, "players": {"online": 3, "list": 3.5}},
        {"online": True, "players": {"online": 3, "sample": "Steve"}},
    ],
)
def test_unexpected_payload_is_wrapped(payload):
    err = fetch_error(FakeResponse(payload))
    assert "unexpected status payload" in str(err)


def test_empty_address_is_rejected():
    fetcher = StatusFetcher("https://api.mcsrvstat.us/2", session=FakeSession(FakeResponse({})))
    with pytest.raises(ValueError):
        asyncio.run(fetcher.fetch(""))


def test_close_leaves_injected_session_open():
    session = FakeSession(FakeResponse({}))
    fetcher = StatusFetcher("https://api.mcsrvstat.us/2", session=session)
    asyncio.run(fetcher.close())
    assert session.closed is False
