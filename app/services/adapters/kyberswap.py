import time
import logging
from typing import Optional
from app.config import settings
from app.models import Calldata, RawQuote, Token
from app.services.adapters.base import QuoteAdapter, unique, zero_quote
from app.services.adapters.http import HttpJsonClient
from app.services.adapters.simulation import SimulationClient

logger = logging.getLogger(__name__)

# 50% in basis points; built calldata is only ever simulated
SLIPPAGE_TOLERANCE_BPS = 5000
DEADLINE_SECONDS = 10 * 60


class KyberSwapAdapter(QuoteAdapter):
    label = "KyberSwap"

    def __init__(
            self,
            http: HttpJsonClient,
            simulator: SimulationClient,
            base_url: Optional[str] = None,
            build_token: Optional[str] = None
    ):
        super().__init__(http, simulator)
        self.base_url = base_url or settings.KYBERSWAP_API_URL
        self.build_token = build_token if build_token is not None else settings.KYBERSWAP_BUILD_TOKEN

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        res = await self.http.get_json(
            f"{self.base_url}/routes",
            params={
                "tokenIn": token_in.address,
                "tokenOut": token_out.address,
                "amountIn": amount_in,
                "gasInclude": "true",
            }
        )

        summary = (res.get("data") or {}).get("routeSummary")
        if not summary:
            return zero_quote(self.label)

        paths = summary.get("route") if isinstance(summary.get("route"), list) else []
        sources = unique(
            part.get("poolType")
            for path in paths if isinstance(path, list)
            for part in path if isinstance(part, dict)
        )

        calldata = await self._build(summary)
        return await self._finish(
            token_in, token_out, amount_in,
            amount_out=summary.get("amountOut"),
            gas_used=summary.get("gas"),
            sources=sources,
            raw_response=res,
            calldata=calldata,
        )

    async def _build(self, summary: dict) -> Optional[Calldata]:
        if not self.build_token:
            logger.debug("KyberSwap build token not configured, skipping calldata")
            return None
        try:
            built = await self.http.post_json(
                f"{self.base_url}/route/build",
                {
                    "routeSummary": summary,
                    "deadline": int(time.time()) + DEADLINE_SECONDS,
                    "enableGasEstimation": False,
                    "recipient": settings.RECIPIENT,
                    "referral": "",
                    "sender": settings.SENDER,
                    "skipSimulateTx": True,
                    "slippageTolerance": SLIPPAGE_TOLERANCE_BPS,
                    "source": "kyberswap",
                },
                headers={"Authorization": f"Bearer {self.build_token}"}
            )
            data = built["data"]
            return Calldata(to=data["routerAddress"], data=data["data"])
        except Exception as e:
            logger.warning(f"KyberSwap calldata build failed: {str(e)}")
            return None
