import httpx
import logging
from typing import Any, Dict, Optional
from app.config import settings
from app.errors import UpstreamError

logger = logging.getLogger(__name__)


class HttpJsonClient:
    """Thin JSON wrapper over httpx.AsyncClient shared by the upstream adapters"""

    def __init__(
            self,
            timeout: Optional[float] = None,
            verify: bool = True,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT,
            verify=verify,
            transport=transport,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": "QuoteCompare/1.0"
            }
        )

    async def get_json(
            self,
            url: str,
            params: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None
    ) -> Any:
        return await self._request("GET", url, params=params, headers=headers)

    async def post_json(
            self,
            url: str,
            payload: Any,
            headers: Optional[Dict[str, str]] = None
    ) -> Any:
        return await self._request("POST", url, json=payload, headers=headers)

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.debug(f"{method} {url} failed: {e.response.status_code} {e.response.text}")
            raise UpstreamError(
                f"{method} {url} returned {e.response.status_code}",
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"{method} {url} failed: {str(e)}") from e
        except ValueError as e:
            raise UpstreamError(f"{method} {url} returned invalid JSON") from e

    async def aclose(self):
        await self.client.aclose()
