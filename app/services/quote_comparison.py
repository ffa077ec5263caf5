import asyncio
import logging
from typing import Callable, List, Optional, Protocol
from app.config import settings
from app.errors import QuoteComparisonError
from app.models import (
    OrderBy,
    QuoteComparisonInput,
    QuoteComparisonResult,
    RawQuote,
    Token,
)
from app.services.coordinator import QuoteTask, settle_quotes
from app.services.ranker import rank_quotes, resolve_order
from app.services.scoring import calculate_scores
from app.services.token_store import TokenStore
from app.services.units import normalize_gas_price

logger = logging.getLogger(__name__)


class QuoteSource(Protocol):
    label: str

    async def fetch(self, token_in: Token, token_out: Token, amount_in: str) -> RawQuote:
        ...


class GasReference(Protocol):
    async def gas_price_token_in(self, token_in: Token, token_out: Token, amount_in: str) -> str:
        ...


class QuoteComparisonService:
    def __init__(
            self,
            token_store: TokenStore,
            reference: GasReference,
            sources: Callable[[str], List[QuoteSource]],
            timeout: Optional[float] = None
    ):
        """
        Args:
            token_store: Resolves request symbols to tokens
            reference: Supplies the gas price in token-in (2^96 fixed point)
            sources: Builds the ordered quote sources for a disable_price flag
            timeout: Budget in seconds for the whole comparison
        """
        self.token_store = token_store
        self.reference = reference
        self.sources = sources
        self.timeout = timeout if timeout is not None else settings.QUOTE_TIMEOUT_SECONDS

    async def compare(self, request: QuoteComparisonInput) -> QuoteComparisonResult:
        """Fetch, score and rank quotes; always returns a result, never raises"""
        order = resolve_order(request.order)
        try:
            return await asyncio.wait_for(self._run(request, order), timeout=self.timeout)
        except asyncio.TimeoutError:
            message = f"Quote comparison timed out after {self.timeout:g} seconds"
            logger.error(message)
            return self._error_result(request, order, message)
        except Exception as e:
            logger.error(f"Error in quote comparison: {str(e)}", exc_info=True)
            return self._error_result(request, order, str(e))

    async def _run(self, request: QuoteComparisonInput, order: OrderBy) -> QuoteComparisonResult:
        # The deadline reaches this coroutine as a cancellation, so a TimeoutError
        # seen here was raised by a collaborator
        try:
            return await self._compare(request, order)
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise QuoteComparisonError(f"Upstream call timed out: {str(e) or type(e).__name__}") from e

    async def _compare(self, request: QuoteComparisonInput, order: OrderBy) -> QuoteComparisonResult:
        amount = request.token_amount
        token_in = await self.token_store.resolve(request.token_in)
        token_out = await self.token_store.resolve(request.token_out)

        gas_price_raw = await self.reference.gas_price_token_in(token_in, token_out, amount)
        gas_price_ratio = normalize_gas_price(gas_price_raw)

        sources = self.sources(request.disable_price)
        logger.info(
            f"Comparing {len(sources)} quotes for {amount} {token_in.symbol} -> {token_out.symbol}"
        )
        raw = await settle_quotes([
            QuoteTask(source.label, source.fetch(token_in, token_out, amount))
            for source in sources
        ])

        scored = calculate_scores(raw, amount, gas_price_ratio)
        return QuoteComparisonResult(
            token_in=request.token_in,
            token_out=request.token_out,
            token_amount=amount,
            token_out_decimals=token_out.decimals,
            gas_price_token_in=gas_price_raw,
            order=order,
            results=rank_quotes(scored, order),
            error=None,
            status="success",
        )

    @staticmethod
    def _error_result(request: QuoteComparisonInput, order: OrderBy, message: str) -> QuoteComparisonResult:
        return QuoteComparisonResult(
            token_in=request.token_in,
            token_out=request.token_out,
            token_amount=request.token_amount,
            token_out_decimals=0,
            gas_price_token_in="0",
            order=order,
            results=[],
            error=message,
            status="error",
        )
