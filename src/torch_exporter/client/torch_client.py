"""Cliente HTTP da API remota do Torch.

Faz pedidos ``GET`` autenticados com token Bearer e decodifica o JSON da
resposta. Não há retries nesta camada: falhas sobem ao chamador como
``TransportError`` (rede/timeout/status HTTP) ou ``DecodeError`` (JSON).
"""

import logging
from typing import Any, Callable, TypeVar

import requests  # type: ignore[import-untyped]

from ..errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TorchClient:
    """Cliente mínimo para ``scheme://host:port{api_base}{path}``.

    Host, porta e token são fixos após a construção. ``session`` permite
    injetar um objeto compatível com ``requests.Session`` (usado em testes).
    """

    def __init__(
        self,
        host: str,
        port: int,
        token: str,
        scheme: str = "http",
        api_base: str = "/api/v1",
        timeout: float | None = None,
        session: Any = None,
    ) -> None:
        self.base_url = f"{scheme}://{host}:{port}{api_base}"
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    @classmethod
    def from_settings(cls, settings, session: Any = None) -> "TorchClient":
        """Constrói o cliente a partir de ``config.settings.Settings``."""
        return cls(
            host=settings.torch_host,
            port=settings.torch_port,
            token=settings.torch_token,
            scheme=settings.scheme,
            api_base=settings.api_base,
            timeout=settings.timeout,
            session=session,
        )

    def url_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}{path}"

    def fetch(self, path: str, decoder: Callable[[Any], T] | None = None) -> Any:
        """Executa ``GET path`` e devolve o JSON decodificado.

        Quando ``decoder`` é informado, o JSON cru é passado a ele e o
        resultado tipado é devolvido. Erros de formato do decoder devem ser
        ``DecodeError``; ``TypeError``/``ValueError``/``KeyError`` também são
        convertidos para ``DecodeError``.
        """
        url = self.url_for(path)
        logger.debug("GET %s", url)
        try:
            resp = self._session.get(url, headers=self._headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(f"GET {path} falhou: {exc}") from exc

        try:
            raw = resp.json()
        except ValueError as exc:
            # requests.JSONDecodeError é subclasse de ValueError
            raise DecodeError(f"GET {path}: resposta não é JSON válido: {exc}") from exc

        if decoder is None:
            return raw
        try:
            return decoder(raw)
        except DecodeError:
            raise
        except (TypeError, ValueError, KeyError) as exc:
            raise DecodeError(f"GET {path}: formato inesperado: {exc}") from exc

    def close(self) -> None:
        self._session.close()
