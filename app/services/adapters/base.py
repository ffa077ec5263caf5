import logging
from typing import Any, Dict, Iterable, List, Optional
from app.models import Calldata, RawQuote, Token
from app.services.adapters.http import HttpJsonClient
from app.services.adapters.simulation import SimulationClient
from app.services.units import to_decimal

logger = logging.getLogger(__name__)


def zero_quote(aggregator: str) -> RawQuote:
    """Quote for a source that answered but had nothing to offer"""
    return RawQuote(aggregator=aggregator, amount_out="0", gas_used=0, sources=[])


def unique(values: Iterable[Optional[str]]) -> List[str]:
    """De-duplicate while keeping first-seen order"""
    seen: Dict[str, None] = {}
    for value in values:
        if isinstance(value, str):
            seen.setdefault(value, None)
    return list(seen)


def to_amount(value: Any) -> str:
    """Base-unit integer string; fractional upstream values are truncated"""
    if value is None or isinstance(value, bool):
        return "0"
    try:
        return str(int(to_decimal(value)))
    except ValueError:
        return "0"


def to_gas(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class QuoteAdapter:
    """
    One upstream quote source.

    Subclasses translate a vendor response into a RawQuote and may raise on
    transport errors; the coordinator turns those into failed rows.
    """

    label: str = "Unknown"

    def __init__(self, http: HttpJsonClient, simulator: SimulationClient):
        self.http = http
        self.simulator = simulator

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        raise NotImplementedError

    async def _finish(
            self,
            token_in: Token,
            token_out: Token,
            amount_in: str,
            amount_out: Any,
            gas_used: Any,
            sources: List[str],
            raw_response: Any,
            calldata: Optional[Calldata],
            sender: Optional[str] = None
    ) -> RawQuote:
        simulation = await self.simulator.try_simulate(
            self.label, calldata, token_in.address, token_out.address, amount_in, sender
        )
        return RawQuote(
            aggregator=self.label,
            amount_out=to_amount(amount_out),
            gas_used=to_gas(gas_used),
            sources=sources,
            raw_response=raw_response,
            calldata=calldata,
            simulation=simulation,
        )
