import json

import httpx
import pytest

from app.errors import UnsupportedTokenError
from app.services.adapters.http import HttpJsonClient
from app.services.cache import ExpiringCache
from app.services.token_store import FALLBACK_TOKENS, TokenStore, normalize_token_list


def test_normalize_token_list_shapes() -> None:
    entry = {"symbol": "DAI", "address": "0x6b17", "decimals": "18", "priceUSD": "1.01"}
    for raw in ({"tokens": [entry]}, [entry], {"dai": entry}):
        tokens = normalize_token_list(raw)
        assert len(tokens) == 1
        assert tokens[0].symbol == "DAI"
        assert tokens[0].name == "DAI"
        assert tokens[0].decimals == 18
        assert str(tokens[0].price_usd) == "1.01"


def test_normalize_token_list_skips_and_defaults() -> None:
    tokens = normalize_token_list([
        {"symbol": "X"},
        {"address": "0x1"},
        "junk",
        {"symbol": "Y", "address": "0x2", "decimals": None, "priceUsd": "abc"},
    ])
    assert [t.symbol for t in tokens] == ["Y"]
    assert tokens[0].decimals == 18
    assert tokens[0].price_usd == 0


@pytest.mark.asyncio
async def test_lookup_is_case_insensitive_and_falls_back(tmp_path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"tokens": [
        {"symbol": "DAI", "address": "0x6b17", "decimals": 18},
        {"symbol": "WBTC", "address": "0xcatalog", "decimals": 8},
    ]}))
    store = TokenStore(path=str(path), url="", ttl=60)

    assert (await store.resolve("dai")).address == "0x6b17"
    # catalog entry wins over the built-in table
    assert (await store.resolve("wbtc")).address == "0xcatalog"
    # unknown to the catalog, known to the built-in table
    assert (await store.resolve("cbbtc")).decimals == 8

    with pytest.raises(UnsupportedTokenError, match="Unsupported token symbol"):
        await store.resolve("NOPE")


@pytest.mark.asyncio
async def test_missing_catalog_uses_fallback_tokens(tmp_path) -> None:
    store = TokenStore(path=str(tmp_path / "missing.json"), url="", ttl=60)
    assert await store.get_all_tokens() == FALLBACK_TOKENS
    assert (await store.resolve("WETH")).decimals == 18


@pytest.mark.asyncio
async def test_catalog_from_url_is_cached() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url)
        return httpx.Response(200, json=[{"symbol": "PEPE", "address": "0xpepe", "decimals": 18}])

    http = HttpJsonClient(transport=httpx.MockTransport(handler))
    store = TokenStore(url="https://tokens.example/list.json", ttl=60, http=http)
    assert (await store.resolve("pepe")).address == "0xpepe"
    assert (await store.resolve("PEPE")).address == "0xpepe"
    assert len(calls) == 1
    await store.aclose()


@pytest.mark.asyncio
async def test_expiring_cache_refreshes_after_expiry() -> None:
    now = [1000.0]
    cache: ExpiringCache[str] = ExpiringCache("jwt", clock=lambda: now[0])
    fetches = []

    async def fetch():
        fetches.append(now[0])
        return f"token-{len(fetches)}", now[0] + 30

    assert await cache.get_or_refresh(fetch) == "token-1"
    now[0] += 10
    assert await cache.get_or_refresh(fetch) == "token-1"
    now[0] += 30
    assert await cache.get_or_refresh(fetch) == "token-2"
    assert len(fetches) == 2
