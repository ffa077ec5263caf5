import logging
from typing import Any, Dict, Optional
from app.config import settings
from app.errors import ReferencePriceError
from app.models import Calldata, RawQuote, Token
from app.services.adapters.base import QuoteAdapter
from app.services.adapters.http import HttpJsonClient
from app.services.adapters.simulation import SimulationClient

logger = logging.getLogger(__name__)


def _quote_params(token_in: Token, token_out: Token, amount_in: str) -> Dict[str, Any]:
    return {
        "asset_in": token_in.address,
        "asset_out": token_out.address,
        "amount_in": amount_in,
        "recipient": settings.RECIPIENT,
        "min_buy_amount": 0,
    }


class ReferencePriceClient:
    """Gas price denominated in the input token, as a 2^96 fixed-point string"""

    def __init__(self, http: HttpJsonClient, base_url: Optional[str] = None):
        self.http = http
        self.base_url = base_url or settings.ROUTER_API_URL

    async def gas_price_token_in(self, token_in: Token, token_out: Token, amount_in: str) -> str:
        try:
            res = await self.http.get_json(
                f"{self.base_url}/quote", params=_quote_params(token_in, token_out, amount_in)
            )
        except Exception as e:
            raise ReferencePriceError(f"Gas price lookup failed: {str(e)}") from e

        value = res.get("gas_price_token_in") if isinstance(res, dict) else None
        if value is None:
            raise ReferencePriceError("Gas price lookup returned no gas_price_token_in")
        return str(value)


class BlazingRouterAdapter(QuoteAdapter):
    def __init__(
            self,
            http: HttpJsonClient,
            simulator: SimulationClient,
            chunk_number: Optional[int] = None,
            disable_price: str = "false",
            base_url: Optional[str] = None
    ):
        super().__init__(http, simulator)
        self.chunk_number = chunk_number
        self.disable_price = disable_price
        self.base_url = base_url or settings.ROUTER_API_URL
        self.label = "Blazing Default" if chunk_number is None else f"Blazing chunks {chunk_number}"

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        params = _quote_params(token_in, token_out, amount_in)
        params["simulate"] = "true"
        params["disable_price"] = self.disable_price
        if self.chunk_number is not None:
            params["chunk_number"] = self.chunk_number

        res = await self.http.get_json(f"{self.base_url}/quote", params=params)

        routes = res.get("route") if isinstance(res.get("route"), list) else []
        sources = [
            route["venue_type"] for route in routes
            if isinstance(route, dict) and isinstance(route.get("venue_type"), str)
        ]
        calldata = None
        to, data = res.get("settler_address"), res.get("call")
        if isinstance(to, str) and isinstance(data, str):
            calldata = Calldata(to=to, data=data)
        else:
            logger.warning(f"{self.label} returned no calldata; quote will not be simulated")
        logger.info(f"{self.label} {sources} {amount_in}")

        # Router settlement is simulated from the DLN bridge as sender
        return await self._finish(
            token_in, token_out, amount_in,
            amount_out=res.get("amount_out_estimated"),
            gas_used=res.get("gas_used"),
            sources=sources,
            raw_response=res,
            calldata=calldata,
            sender=settings.DLN_ROUTER,
        )
