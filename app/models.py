from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    symbol: str
    name: str
    decimals: int
    price_usd: Optional[Decimal] = None


class OrderBy(str, Enum):
    SCORE = "score"
    NET = "net"
    OUTPUT = "output"


class Calldata(BaseModel):
    """Prepared transaction handed to the simulator"""
    model_config = ConfigDict(frozen=True)

    to: str
    data: str


class SimulationResult(BaseModel):
    """Realized execution of a quote's calldata, as reported by the simulator"""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    balance_of_before: Optional[str] = None
    balance_of_after: Optional[str] = None
    output_token_amount: Optional[str] = None
    output_token: Optional[str] = None
    approve_tx_gas_used: int = 0
    swap_tx_gas_used: int = 0
    is_successful: bool = False
    sim_block_number: Optional[str] = None
    sim_time: Optional[str] = None
    sim_time_total: Optional[str] = None
    request_id: Optional[str] = None

    @field_validator(
        "balance_of_before", "balance_of_after", "output_token_amount",
        "sim_block_number", "sim_time", "sim_time_total",
        mode="before",
    )
    @classmethod
    def _numbers_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def total_gas(self) -> int:
        return self.approve_tx_gas_used + self.swap_tx_gas_used


class RawQuote(BaseModel):
    """Normalized output of one aggregator adapter"""
    model_config = ConfigDict(frozen=True)

    aggregator: str
    amount_out: Optional[str] = None
    gas_used: Optional[int] = None
    sources: Optional[List[str]] = None
    raw_response: Optional[Any] = None
    calldata: Optional[Calldata] = None
    simulation: Optional[SimulationResult] = None
    failed: bool = False

    @model_validator(mode="after")
    def _failed_rows_carry_no_values(self) -> "RawQuote":
        if self.failed and (
            self.amount_out is not None
            or self.gas_used is not None
            or self.sources is not None
            or self.simulation is not None
        ):
            raise ValueError("failed quote must not carry amount_out, gas_used, sources or simulation")
        return self

    @classmethod
    def failure(cls, aggregator: str) -> "RawQuote":
        return cls(aggregator=aggregator, failed=True)


class QuoteRow(RawQuote):
    """RawQuote with its derived ranking values"""
    net_output: float = 0.0
    distance: float = 0.0
    score: float = float("inf")


class QuoteComparisonInput(BaseModel):
    token_in: str = "WETH"
    token_out: str = "WBTC"
    token_amount: str = "1000000000000000000"
    order: Optional[str] = OrderBy.NET.value
    disable_price: str = "false"


class QuoteComparisonResult(BaseModel):
    token_in: str
    token_out: str
    token_amount: str
    token_out_decimals: int
    gas_price_token_in: str
    order: OrderBy
    results: List[QuoteRow]
    error: Optional[str] = None
    status: str
