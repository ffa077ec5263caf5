import asyncio

import pytest

from app.models import RawQuote
from app.services.coordinator import QuoteTask, settle_quotes


async def _ok(name: str, delay: float) -> RawQuote:
    await asyncio.sleep(delay)
    return RawQuote(aggregator=name, amount_out="1", gas_used=1, sources=["x"])


async def _boom(delay: float) -> RawQuote:
    await asyncio.sleep(delay)
    raise RuntimeError("upstream 500")


async def _wrong_type():
    return {"amountOut": "1"}


@pytest.mark.asyncio
async def test_settle_preserves_order_regardless_of_completion() -> None:
    quotes = await settle_quotes([
        QuoteTask("slow", _ok("slow", 0.05)),
        QuoteTask("fast", _ok("fast", 0.0)),
        QuoteTask("mid", _ok("mid", 0.02)),
    ])
    assert [q.aggregator for q in quotes] == ["slow", "fast", "mid"]
    assert not any(q.failed for q in quotes)


@pytest.mark.asyncio
async def test_failures_become_labelled_failed_rows() -> None:
    quotes = await settle_quotes([
        QuoteTask("A", _boom(0.0)),
        QuoteTask("B", _ok("B", 0.02)),
        QuoteTask("C", _wrong_type()),
    ])
    assert len(quotes) == 3
    assert quotes[0] == RawQuote.failure("A")
    assert quotes[0].failed and quotes[0].amount_out is None and quotes[0].sources is None
    assert quotes[1].aggregator == "B" and not quotes[1].failed
    assert quotes[2].failed and quotes[2].aggregator == "C"


@pytest.mark.asyncio
async def test_failure_does_not_cancel_siblings() -> None:
    finished = []

    async def slow() -> RawQuote:
        await asyncio.sleep(0.05)
        finished.append("slow")
        return RawQuote(aggregator="slow", amount_out="1", gas_used=1, sources=[])

    quotes = await settle_quotes([QuoteTask("boom", _boom(0.0)), QuoteTask("slow", slow())])
    assert finished == ["slow"]
    assert [q.failed for q in quotes] == [True, False]


@pytest.mark.asyncio
async def test_empty_batch() -> None:
    assert await settle_quotes([]) == []
