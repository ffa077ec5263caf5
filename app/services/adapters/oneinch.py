import uuid
import logging
from typing import Any, Optional, Tuple
from app.config import settings
from app.models import Calldata, RawQuote, Token
from app.services.cache import ExpiringCache
from app.services.adapters.base import QuoteAdapter, unique
from app.services.adapters.http import HttpJsonClient
from app.services.adapters.simulation import SimulationClient

logger = logging.getLogger(__name__)

ROUTER_V6 = "0x111111125421cA6dc452d289314280a0f8842A65"
QUOTE_GAS_PRICE = "148636342"
EXCLUDED_PROTOCOLS = ",".join(f"PMM{i}" for i in range(1, 17))
SLIPPAGE_PERCENT = 5


class OneInchAdapter(QuoteAdapter):
    label = "1Inch"

    def __init__(
            self,
            http: HttpJsonClient,
            simulator: SimulationClient,
            base_url: Optional[str] = None,
            token_cache: Optional[ExpiringCache[str]] = None
    ):
        super().__init__(http, simulator)
        self.base_url = base_url or settings.ONEINCH_API_URL
        self.token_cache = token_cache or ExpiringCache("1inch-auth")

    async def _fetch_token(self) -> Tuple[str, float]:
        res = await self.http.get_json(f"{self.base_url}/auth/token?ngsw-bypass")
        return res["access_token"], float(res["exp"])

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        token = await self.token_cache.get_or_refresh(self._fetch_token)
        headers = {"Authorization": f"Bearer {token}"}
        res = await self.http.get_json(
            f"{self.base_url}/v2.2/chain/1/router/v6/quotesv2",
            params={
                "fromTokenAddress": token_in.address,
                "toTokenAddress": token_out.address,
                "amount": amount_in,
                "gasPrice": QUOTE_GAS_PRICE,
                "preset": "maxReturnResult",
                "walletAddress": settings.SENDER,
                "excludedProtocols": EXCLUDED_PROTOCOLS,
            },
            headers=headers
        )

        best = res.get("bestResult") or {}
        levels = best.get("levels") if isinstance(best.get("levels"), list) else []
        sources = unique(
            (swap.get("market") or {}).get("name")
            for level in levels
            for hop in level.get("hops", [])
            for swap in hop.get("swaps", [])
        )

        calldata = await self._build(token_in, token_out, amount_in, best, headers)
        return await self._finish(
            token_in, token_out, amount_in,
            amount_out=best.get("tokenAmount"),
            gas_used=best.get("gas"),
            sources=sources,
            raw_response=res,
            calldata=calldata,
        )

    async def _build(
            self,
            token_in: Token,
            token_out: Token,
            amount_in: str,
            best: dict,
            headers: dict
    ) -> Optional[Calldata]:
        expected: Any = best.get("tokenAmount")
        try:
            built = await self.http.post_json(
                f"{self.base_url}/bff/v1.0/v6.0/1/build?version=2",
                {
                    "enableEstimate": False,
                    "expectedReturnAmount": str(expected) if expected else "0",
                    "fromTokenAddress": token_in.address,
                    "fromTokenAmount": amount_in,
                    "gasPrice": best.get("gas"),
                    "id": str(uuid.uuid4()),
                    "slippage": SLIPPAGE_PERCENT,
                    "toTokenAddress": token_out.address,
                    "walletAddress": settings.SENDER,
                },
                headers=headers
            )
            return Calldata(to=ROUTER_V6, data=built["data"])
        except Exception as e:
            logger.warning(f"1Inch calldata build failed: {str(e)}")
            return None
