"""
Shared test fixtures for ado-cli tests.
Isolates config, env, and keyring so no test touches real user state or the network.
"""

import pytest

from ado_cli import config, credentials
from ado_cli.api import CONTENT_JSON, Endpoint

_ENV_KEYS = [
    "ADO_PAT",
    "ADO_ORGANIZATION",
    "ADO_PROJECT",
    "ADO_OUTPUT_FORMAT",
    "ADO_HTTP_LOG",
    "ADO_API_VERSION",
]


class FakeKeyring:
    """In-memory stand-in for the keyring module functions."""

    def __init__(self):
        self.store = {}

    def get_password(self, service, user):
        return self.store.get((service, user))

    def set_password(self, service, user, secret):
        self.store[(service, user)] = secret

    def delete_password(self, service, user):
        from keyring.errors import PasswordDeleteError

        if (service, user) not in self.store:
            raise PasswordDeleteError("not found")
        del self.store[(service, user)]


class StubTransport:
    """Records every request and replays canned responses in order.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, *responses, organization="contoso"):
        self.endpoint = Endpoint.for_organization(organization, "7.1")
        self.responses = list(responses)
        self.calls = []

    def request_json(self, method, target, body=None, content_type=CONTENT_JSON):
        self.calls.append(
            {"method": method, "target": target, "body": body, "content_type": content_type}
        )
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {target}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Every test gets an empty config dir, clean env, and a fake keyring."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ADO_CONFIG_DIR", str(tmp_path / "ado"))
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    fake = FakeKeyring()
    monkeypatch.setattr(credentials.keyring, "get_password", fake.get_password)
    monkeypatch.setattr(credentials.keyring, "set_password", fake.set_password)
    monkeypatch.setattr(credentials.keyring, "delete_password", fake.delete_password)
    return fake


@pytest.fixture
def fake_keyring(_isolate_config):
    return _isolate_config


@pytest.fixture
def stub_transport():
    return StubTransport
