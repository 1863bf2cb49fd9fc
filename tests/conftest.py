import json
from unittest import mock

import pytest
import requests

from insee_sirene.client import InseeClient
from insee_sirene.config import InseeSettings
from insee_sirene.token_store import InMemoryTokenStore


def make_response(status=200, payload=None, text=None, url="https://api.insee.fr/"):
    r = requests.Response()
    r.status_code = status
    r.url = url
    r.encoding = "utf-8"
    if text is None:
        text = json.dumps(payload if payload is not None else {})
    r._content = text.encode("utf-8")
    return r


def token_response(value="tok-123", expires_in=604800):
    return make_response(payload={"access_token": value, "expires_in": expires_in, "token_type": "Bearer"})


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def settings():
    return InseeSettings(consumer_key="my-key", consumer_secret="my-secret")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryTokenStore(clock=clock)


@pytest.fixture
def session():
    return mock.create_autospec(requests.Session, instance=True)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(settings, store, session, sleeps):
    return InseeClient(settings=settings, store=store, session=session, sleep=sleeps.append)
