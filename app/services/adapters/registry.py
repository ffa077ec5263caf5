from typing import List, Optional
from app.config import settings
from app.services.cache import ExpiringCache
from app.services.adapters.base import QuoteAdapter
from app.services.adapters.blazing import BlazingRouterAdapter, ReferencePriceClient
from app.services.adapters.http import HttpJsonClient
from app.services.adapters.kyberswap import KyberSwapAdapter
from app.services.adapters.oneinch import OneInchAdapter
from app.services.adapters.simulation import SimulationClient
from app.services.adapters.zerox import MatchaAdapter, ZeroExAdapter


class AdapterRegistry:
    """
    Owns the HTTP clients and auth-token caches shared by all requests and
    builds the ordered adapter list for each comparison.
    """

    def __init__(self, chunk_sizes: Optional[List[int]] = None):
        self.chunk_sizes = list(chunk_sizes if chunk_sizes is not None else settings.CHUNK_SIZES)
        self.http = HttpJsonClient()
        # Router and Kyber build endpoints are reached without certificate checks
        self.insecure_http = HttpJsonClient(verify=False)
        self.simulator = SimulationClient(self.http)
        self.reference = ReferencePriceClient(self.insecure_http)
        self.oneinch_token: ExpiringCache[str] = ExpiringCache("1inch-auth")
        self.matcha_token: ExpiringCache[str] = ExpiringCache("matcha-jwt")

    def adapters(self, disable_price: str = "false") -> List[QuoteAdapter]:
        """Aggregators first, then each router chunk size, then the router default"""
        adapters: List[QuoteAdapter] = [
            KyberSwapAdapter(self.insecure_http, self.simulator),
            OneInchAdapter(self.http, self.simulator, token_cache=self.oneinch_token),
            MatchaAdapter(self.http, self.simulator, token_cache=self.matcha_token),
            ZeroExAdapter(self.http, self.simulator),
        ]
        adapters.extend(
            BlazingRouterAdapter(self.insecure_http, self.simulator, chunk, disable_price)
            for chunk in self.chunk_sizes
        )
        adapters.append(BlazingRouterAdapter(self.insecure_http, self.simulator, None, disable_price))
        return adapters

    async def aclose(self):
        await self.http.aclose()
        await self.insecure_http.aclose()
