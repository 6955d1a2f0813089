"""Tests for CardRepository HTTP access."""

from types import SimpleNamespace

import pytest

import repositories.card_repository as card_repository_module
from repositories.card_repository import CardRepository, get_card_repository


class FakeResponse:
    def __init__(self, payload=None, content=b"", status_error=None, json_error=None):
        self._payload = payload
        self.content = content
        self._status_error = status_error
        self._json_error = json_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error

    def json(self):
        if self._json_error:
            raise self._json_error
        return self._payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []
    state = SimpleNamespace(response=FakeResponse(payload={"cards": []}), calls=calls)

    def _get(url, **kwargs):
        calls.append((url, kwargs))
        return state.response

    monkeypatch.setattr(card_repository_module.requests, "get", _get)
    return state


@pytest.fixture
def repository():
    return CardRepository(api_base_url="https://api.test/v1/", image_base_url="https://img.test/")


def test_fetch_cards_sends_name_parameter(fake_get, repository):
    fake_get.response = FakeResponse(payload={"cards": [{"id": "base1-58", "name": "Pikachu"}]})

    cards = repository.fetch_cards("Pikachu & Zekrom")

    assert cards == [{"id": "base1-58", "name": "Pikachu"}]
    url, kwargs = fake_get.calls[0]
    assert url == "https://api.test/v1/cards"
    assert kwargs["params"] == {"name": "Pikachu & Zekrom"}
    assert kwargs["timeout"] == repository.timeout


def test_fetch_cards_without_cards_key_returns_empty(fake_get, repository):
    fake_get.response = FakeResponse(payload={"error": "nothing here"})

    assert repository.fetch_cards("Missingno") == []


def test_fetch_cards_drops_non_object_entries(fake_get, repository):
    fake_get.response = FakeResponse(payload={"cards": [{"id": "a"}, "junk", 3, None]})

    assert repository.fetch_cards("a") == [{"id": "a"}]


def test_fetch_cards_rejects_non_object_payload(fake_get, repository):
    fake_get.response = FakeResponse(payload=[{"id": "a"}])

    with pytest.raises(ValueError):
        repository.fetch_cards("a")


def test_fetch_cards_propagates_http_errors(fake_get, repository):
    fake_get.response = FakeResponse(status_error=RuntimeError("HTTP 503"))

    with pytest.raises(RuntimeError, match="503"):
        repository.fetch_cards("Pikachu")


def test_fetch_cards_propagates_decode_errors(fake_get, repository):
    fake_get.response = FakeResponse(json_error=ValueError("Expecting value"))

    with pytest.raises(ValueError):
        repository.fetch_cards("Pikachu")


def test_fetch_image_returns_bytes(fake_get, repository):
    fake_get.response = FakeResponse(content=b"\x89PNG...")

    data = repository.fetch_image("https://img.test/base1/58.png")

    assert data == b"\x89PNG..."
    assert fake_get.calls[0][0] == "https://img.test/base1/58.png"


def test_build_image_url(repository):
    assert repository.build_image_url({"setCode": "base1", "number": "58"}) == (
        "https://img.test/base1/58.png"
    )


@pytest.mark.parametrize(
    "card",
    [
        {},
        {"setCode": "base1"},
        {"number": "58"},
        {"setCode": "", "number": "58"},
        {"setCode": "base1", "number": 58},
    ],
)
def test_build_image_url_requires_set_and_number(repository, card):
    assert repository.build_image_url(card) is None


def test_get_card_repository_returns_singleton():
    assert get_card_repository() is get_card_repository()
