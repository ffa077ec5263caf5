import logging
from typing import Dict, Optional, Tuple
from app.config import settings
from app.models import Calldata, RawQuote, Token
from app.services.cache import ExpiringCache
from app.services.adapters.base import QuoteAdapter, zero_quote
from app.services.adapters.http import HttpJsonClient
from app.services.adapters.simulation import SimulationClient

logger = logging.getLogger(__name__)


class ZeroExStyleAdapter(QuoteAdapter):
    """Shared parsing for 0x v2 shaped responses (0x API and Matcha)"""

    async def _quote(self, token_in: Token, token_out: Token, amount_in: str) -> Dict:
        raise NotImplementedError

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        res = await self._quote(token_in, token_out, amount_in)

        fills = (res.get("route") or {}).get("fills")
        sources = [fill.get("source") for fill in fills] if isinstance(fills, list) else []
        transaction = res["transaction"]
        calldata = Calldata(to=transaction["to"], data=transaction["data"])

        return await self._finish(
            token_in, token_out, amount_in,
            amount_out=res.get("buyAmount"),
            gas_used=transaction.get("gas"),
            sources=[s for s in sources if isinstance(s, str)],
            raw_response=res,
            calldata=calldata,
        )


class ZeroExAdapter(ZeroExStyleAdapter):
    label = "0x"

    def __init__(
            self,
            http: HttpJsonClient,
            simulator: SimulationClient,
            api_key: Optional[str] = None,
            base_url: Optional[str] = None
    ):
        super().__init__(http, simulator)
        self.api_key = api_key if api_key is not None else settings.ZEROX_API_KEY
        self.base_url = base_url or settings.ZEROX_API_URL

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        if not self.api_key:
            return zero_quote(self.label)
        return await super().fetch(token_in, token_out, amount_in)

    async def _quote(self, token_in: Token, token_out: Token, amount_in: str) -> Dict:
        return await self.http.get_json(
            f"{self.base_url}/swap/allowance-holder/quote",
            params={
                "chainId": 1,
                "sellToken": token_in.address,
                "buyToken": token_out.address,
                "sellAmount": amount_in,
                "taker": settings.RECIPIENT,
            },
            headers={"0x-api-key": self.api_key, "0x-version": "v2"}
        )


class MatchaAdapter(ZeroExStyleAdapter):
    label = "Matcha"

    def __init__(
            self,
            http: HttpJsonClient,
            simulator: SimulationClient,
            base_url: Optional[str] = None,
            token_cache: Optional[ExpiringCache[str]] = None
    ):
        super().__init__(http, simulator)
        self.base_url = base_url or settings.MATCHA_API_URL
        self.token_cache = token_cache or ExpiringCache("matcha-jwt")

    async def _fetch_token(self) -> Tuple[str, float]:
        res = await self.http.get_json(f"{self.base_url}/jwt")
        return res["token"], float(res["exp"])

    async def _quote(self, token_in: Token, token_out: Token, amount_in: str) -> Dict:
        jwt = await self.token_cache.get_or_refresh(self._fetch_token)
        return await self.http.get_json(
            f"{self.base_url}/swap/quote",
            params={
                "chainId": 1,
                "buyToken": token_out.address,
                "sellToken": token_in.address,
                "sellAmount": amount_in,
                "useIntents": "false",
                "taker": settings.RECIPIENT,
                "slippageBps": 50,
            },
            headers={"x-matcha-jwt": jwt}
        )
