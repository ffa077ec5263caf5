import math
import logging
from typing import List, Optional
import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info
from app.models import (
    Calldata as CalldataModel,
    QuoteComparisonInput,
    QuoteComparisonResult,
    QuoteRow as QuoteRowModel,
    SimulationResult as SimulationResultModel,
    Token as TokenModel,
)
from app.services.units import format_token_amount

logger = logging.getLogger(__name__)


@strawberry.type
class Token:
    """GraphQL Token type"""
    address: str
    symbol: str
    name: str
    price_usd: float = strawberry.field(name="priceUsd")
    decimals: int

    @classmethod
    def from_model(cls, token: TokenModel) -> "Token":
        return cls(
            address=token.address,
            symbol=token.symbol,
            name=token.name,
            price_usd=float(token.price_usd if token.price_usd is not None else 0),
            decimals=token.decimals
        )


@strawberry.type
class Calldata:
    to: str
    data: str

    @classmethod
    def from_model(cls, calldata: Optional[CalldataModel]) -> Optional["Calldata"]:
        if calldata is None:
            return None
        return cls(to=calldata.to, data=calldata.data)


@strawberry.type
class SimulationResult:
    balance_of_before: Optional[str]
    balance_of_after: Optional[str]
    output_token_amount: Optional[str]
    output_token: Optional[str]
    approve_tx_gas_used: int
    swap_tx_gas_used: int
    is_successful: bool
    sim_block_number: Optional[str]
    sim_time: Optional[str]
    sim_time_total: Optional[str]
    request_id: Optional[str]

    @classmethod
    def from_model(cls, simulation: Optional[SimulationResultModel]) -> Optional["SimulationResult"]:
        if simulation is None:
            return None
        return cls(**simulation.model_dump())


@strawberry.type
class QuoteRow:
    aggregator: str
    amount_out: Optional[str]
    # token-out units, truncated to 6 decimals
    amount_out_formatted: Optional[str]
    gas_used: Optional[int]
    sources: Optional[List[str]]
    raw_response: Optional[JSON]
    calldata: Optional[Calldata]
    simulation: Optional[SimulationResult]
    failed: bool
    net_output: float
    distance: float
    # null means unranked (no successful simulation)
    score: Optional[float]

    @classmethod
    def from_model(cls, row: QuoteRowModel, token_out_decimals: int) -> "QuoteRow":
        formatted = None
        if row.amount_out is not None:
            formatted = format_token_amount(row.amount_out, token_out_decimals)
        return cls(
            aggregator=row.aggregator,
            amount_out=row.amount_out,
            amount_out_formatted=formatted,
            gas_used=row.gas_used,
            sources=row.sources,
            raw_response=row.raw_response,
            calldata=Calldata.from_model(row.calldata),
            simulation=SimulationResult.from_model(row.simulation),
            failed=row.failed,
            net_output=row.net_output,
            distance=row.distance,
            score=row.score if math.isfinite(row.score) else None
        )


@strawberry.type
class QuoteComparison:
    token_in: str
    token_out: str
    token_amount: str
    token_out_decimals: int
    gas_price_token_in: str
    order: str
    results: List[QuoteRow]
    error: Optional[str]
    status: str

    @classmethod
    def from_model(cls, result: QuoteComparisonResult) -> "QuoteComparison":
        return cls(
            token_in=result.token_in,
            token_out=result.token_out,
            token_amount=result.token_amount,
            token_out_decimals=result.token_out_decimals,
            gas_price_token_in=result.gas_price_token_in,
            order=result.order.value,
            results=[QuoteRow.from_model(row, result.token_out_decimals) for row in result.results],
            error=result.error,
            status=result.status
        )


@strawberry.type
class Query:
    @strawberry.field
    async def available_tokens(self, info: Info) -> List[Token]:
        try:
            token_store = info.context["token_store"]
            tokens = await token_store.get_all_tokens()
            return [Token.from_model(token) for token in tokens]
        except Exception as e:
            logger.error(f"Error in available_tokens: {str(e)}")
            return []

    @strawberry.field
    async def quote_comparison(
            self,
            info: Info,
            token_in: str = "WETH",
            token_out: str = "WBTC",
            token_amount: str = "1000000000000000000",
            order: Optional[str] = "net",
            disable_price: str = "false"
    ) -> QuoteComparison:
        quote_service = info.context["quote_service"]
        result = await quote_service.compare(QuoteComparisonInput(
            token_in=token_in,
            token_out=token_out,
            token_amount=token_amount,
            order=order,
            disable_price=disable_price
        ))
        return QuoteComparison.from_model(result)


schema = strawberry.Schema(query=Query)
