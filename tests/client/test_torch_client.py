import pytest
import requests

from torch_exporter.client.torch_client import TorchClient
from torch_exporter.config.settings import Settings
from torch_exporter.errors import DecodeError, TransportError


def test_fetch_sends_bearer_token_and_builds_url(client, fake_session):
    """Teste para URL completa e cabeçalho Authorization."""
    fake_session.routes["/grids"] = [1, 2]
    assert client.fetch("/grids") == [1, 2]
    call = fake_session.calls[0]
    assert call["url"] == "http://torch.local:8080/api/v1/grids"
    assert call["headers"]["Authorization"] == "Bearer s3cret"
    assert call["timeout"] is None


def test_fetch_applies_decoder(client, fake_session):
    fake_session.routes["/grids"] = [1, 2, 3]
    assert client.fetch("grids", len) == 3


@pytest.mark.parametrize(
    "exc",
    [requests.ConnectionError("refused"), requests.Timeout("timed out"), requests.TooManyRedirects("loop")],
)
def test_transport_failures(client, fake_session, exc):
    """Falhas de rede viram TransportError."""
    fake_session.routes["/server/status"] = exc
    with pytest.raises(TransportError) as info:
        client.fetch("/server/status")
    assert info.value.__cause__ is exc


def test_http_error_status_is_transport_error(client, fake_session, fake_response):
    fake_session.routes["/players"] = fake_response(status=401)
    with pytest.raises(TransportError):
        client.fetch("/players")


def test_invalid_json_is_decode_error(client, fake_session, fake_response):
    fake_session.routes["/players"] = fake_response(text="<html>")
    with pytest.raises(DecodeError):
        client.fetch("/players")


def test_decoder_errors_become_decode_error(client, fake_session):
    """Erros genéricos do decoder são normalizados para DecodeError."""
    fake_session.routes["/worlds/x"] = {"unexpected": True}

    def decoder(raw):
        return raw["name"]

    with pytest.raises(DecodeError):
        client.fetch("/worlds/x", decoder)


def test_from_settings_and_close(make_session):
    session = make_session(base="https://example:4443/api")
    settings = Settings("example", 4443, "tok", scheme="https", api_base="/api", timeout=2.5)
    c = TorchClient.from_settings(settings, session=session)
    session.routes["/players"] = []
    c.fetch("/players")
    assert session.calls[0]["url"] == "https://example:4443/api/players"
    assert session.calls[0]["timeout"] == 2.5
    c.close()
    assert session.closed
