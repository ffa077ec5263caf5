import logging
from typing import Optional
from app.config import settings
from app.models import Calldata, SimulationResult
from app.services.adapters.http import HttpJsonClient

logger = logging.getLogger(__name__)


class SimulationClient:
    def __init__(self, http: HttpJsonClient, url: Optional[str] = None):
        self.http = http
        self.url = url or settings.SIMULATION_API_URL

    async def simulate(
            self,
            calldata: Calldata,
            token_in: str,
            token_out: str,
            amount_in: str,
            sender: Optional[str] = None
    ) -> SimulationResult:
        """Execute calldata against the simulator and return the realized output and gas"""
        payload = {
            "recipient": settings.RECIPIENT,
            "outputToken": token_out,
            "tokenIn": token_in,
            "tokenInAmount": amount_in,
            "tx": {
                "from": sender or settings.SENDER,
                "to": calldata.to,
                "input": calldata.data,
            },
        }
        data = await self.http.post_json(self.url, payload)
        return SimulationResult.model_validate(data)

    async def try_simulate(
            self,
            label: str,
            calldata: Optional[Calldata],
            token_in: str,
            token_out: str,
            amount_in: str,
            sender: Optional[str] = None
    ) -> Optional[SimulationResult]:
        """Like simulate(), but a failure only costs the quote its score"""
        if calldata is None:
            return None
        try:
            return await self.simulate(calldata, token_in, token_out, amount_in, sender)
        except Exception as e:
            logger.warning(f"{label} failed simulation: {str(e)}")
            return None
