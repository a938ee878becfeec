# Fixtures partilhadas: API do Torch simulada via sessão HTTP falsa
import pytest
import requests

from torch_exporter.client.torch_client import TorchClient
from torch_exporter.monitoring.registry import MetricRegistry


class FakeResponse:
    def __init__(self, payload=None, status=200, text=None):
        self.payload = payload
        self.status_code = status
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self.text is not None:
            raise ValueError(f"Expecting value: {self.text!r}")
        return self.payload


class FakeSession:
    """Substitui ``requests.Session``: responde por caminho a partir de ``routes``.

    Um valor em ``routes`` pode ser um payload JSON, uma ``FakeResponse`` ou
    uma exceção (que é levantada).
    """

    def __init__(self, routes=None, base="http://torch.local:8080/api/v1"):
        self.routes = dict(routes or {})
        self.base = base
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
        path = url[len(self.base) :] if url.startswith(self.base) else url
        if path not in self.routes:
            return FakeResponse(status=404)
        val = self.routes[path]
        if isinstance(val, BaseException):
            raise val
        if isinstance(val, FakeResponse):
            return val
        return FakeResponse(val)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def client(fake_session):
    return TorchClient("torch.local", 8080, "s3cret", session=fake_session)


@pytest.fixture
def registry():
    return MetricRegistry()


@pytest.fixture
def status_payload():
    return {"simSpeed": 0.97, "memberCount": 3, "uptime": "26:03:09", "status": 2}


@pytest.fixture
def fake_response():
    """Classe ``FakeResponse`` para rotas com status/corpo específicos."""
    return FakeResponse


@pytest.fixture
def make_session():
    """Fábrica de ``FakeSession`` com outra URL base."""
    return FakeSession
