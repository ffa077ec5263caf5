import math
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import List, Optional
from app.models import QuoteRow, RawQuote
from app.services.units import PRECISION, to_decimal

logger = logging.getLogger(__name__)

NET_OUTPUT_PLACES = Decimal("1e-18")
DISTANCE_PLACES = Decimal("1e-8")
SCORE_PLACES = Decimal("1e-6")

UNRANKED = math.inf


def _decimal_or_none(value) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return to_decimal(value)
    except ValueError:
        return None


def _narrow(value: Decimal, places: Decimal, fallback: float) -> float:
    """Round to `places` and convert to float; non-finite results degrade to fallback"""
    if not value.is_finite():
        return fallback
    try:
        value = value.quantize(places, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More integer digits than the context can hold at `places`
        pass
    result = float(value)
    return result if math.isfinite(result) else fallback


def net_output(quote: RawQuote, amount_in: Decimal, gas_price_ratio: Decimal) -> Decimal:
    """
    Output minus the gas cost re-expressed at the quote's own exchange rate:
    amount_out - gas_used * ratio * amount_out / amount_in
    """
    if quote.failed:
        return Decimal(0)
    amount_out = _decimal_or_none(quote.amount_out) or Decimal(0)
    gas_used = Decimal(quote.gas_used or 0)
    if amount_in == 0:
        return amount_out
    gas_cost = gas_used * gas_price_ratio
    return amount_out - gas_cost * amount_out / amount_in


def _simulated_output(quote: RawQuote) -> Optional[Decimal]:
    """Realized output of a successful simulation, None when there is none"""
    simulation = quote.simulation
    if simulation is None or not simulation.is_successful:
        return None
    return _decimal_or_none(simulation.output_token_amount)


def _normalize(value: Decimal, low: Decimal, high: Decimal, tie: Decimal) -> Decimal:
    if high == low:
        return tie
    return (value - low) / (high - low)


def calculate_scores(
        raw: List[RawQuote],
        amount_in: str,
        gas_price_ratio: Decimal
) -> List[QuoteRow]:
    """
    Derive net_output, distance and score for every quote.

    Score compares successfully simulated quotes only: realized output and
    total gas are min/max normalized, and the score is the distance from
    (best output, least gas) scaled into [0, 1]. Lower is better. Quotes
    without a successful simulation score +inf.
    """
    if not raw:
        return []

    with localcontext() as ctx:
        ctx.prec = PRECISION

        amount_in_value = _decimal_or_none(amount_in) or Decimal(0)
        nets = [net_output(quote, amount_in_value, gas_price_ratio) for quote in raw]
        net_max = max(nets)

        distances: List[Decimal] = []
        for quote, net in zip(raw, nets):
            if quote.failed or net_max <= 0:
                distances.append(Decimal(0))
            else:
                distances.append((net_max - net) / net_max * 100)

        outputs = [_simulated_output(quote) for quote in raw]
        simulated = [
            (output, Decimal(quote.simulation.total_gas))
            for quote, output in zip(raw, outputs) if output is not None
        ]

        scores: List[float] = [UNRANKED] * len(raw)
        if simulated:
            out_low = min(output for output, _ in simulated)
            out_high = max(output for output, _ in simulated)
            gas_low = min(gas for _, gas in simulated)
            gas_high = max(gas for _, gas in simulated)
            sqrt_two = Decimal(2).sqrt()

            for index, (quote, output) in enumerate(zip(raw, outputs)):
                if output is None:
                    continue
                gas = Decimal(quote.simulation.total_gas)
                output_norm = _normalize(output, out_low, out_high, Decimal(1))
                gas_norm = _normalize(gas, gas_low, gas_high, Decimal(0))
                euclidean = ((output_norm - 1) ** 2 + gas_norm ** 2).sqrt()
                bounded = max(Decimal(0), min(Decimal(1), euclidean / sqrt_two))
                scores[index] = _narrow(bounded, SCORE_PLACES, UNRANKED)
        else:
            logger.info("No successful simulations, every quote is unranked by score")

        rows: List[QuoteRow] = []
        for quote, net, distance, score in zip(raw, nets, distances, scores):
            rows.append(QuoteRow(**{
                **dict(quote),
                "net_output": _narrow(net, NET_OUTPUT_PLACES, 0.0),
                "distance": _narrow(distance, DISTANCE_PLACES, 0.0),
                "score": score,
            }))
        return rows
