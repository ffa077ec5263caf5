import json
import time
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from decimal import Decimal, InvalidOperation
from app.models import Token
from app.config import settings
from app.errors import UnsupportedTokenError
from app.services.cache import ExpiringCache
from app.services.adapters.http import HttpJsonClient

logger = logging.getLogger(__name__)

# Used when the catalog cannot be loaded or does not know a symbol
FALLBACK_TOKENS: List[Token] = [
    Token(symbol="USDT", name="USDT", address="0xdac17f958d2ee523a2206206994597c13d831ec7",
          decimals=6, price_usd=Decimal("0.99")),
    Token(symbol="ETH", name="ETH", address="0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
          decimals=18, price_usd=Decimal("3321.0")),
    Token(symbol="WETH", name="WETH", address="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
          decimals=18, price_usd=Decimal("3321.0")),
    Token(symbol="USDC", name="USDC", address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
          decimals=6, price_usd=Decimal("0.9")),
    Token(symbol="WBTC", name="WBTC", address="0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
          decimals=8, price_usd=Decimal("86000.0")),
    Token(symbol="cbBTC", name="cbBTC", address="0xcbB7C0000aB88B473b1f5aFd9ef808440eed33Bf",
          decimals=8, price_usd=Decimal("86000.0")),
]


def _to_int(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _to_decimal(value: Any) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(0)
    return result if result.is_finite() else Decimal(0)


def normalize_token_list(raw: Any) -> List[Token]:
    """Accept {"tokens": [...]}, a bare list, or a mapping of token objects"""
    source = raw.get("tokens", raw) if isinstance(raw, dict) else raw
    if isinstance(source, dict):
        items = list(source.values())
    elif isinstance(source, list):
        items = source
    else:
        items = []

    tokens: List[Token] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        symbol = item.get("symbol")
        address = item.get("address")
        if not isinstance(symbol, str) or not isinstance(address, str):
            continue
        name = item.get("name")
        tokens.append(Token(
            symbol=symbol,
            name=name if isinstance(name, str) else symbol,
            address=address,
            decimals=_to_int(item.get("decimals"), 18),
            price_usd=_to_decimal(item.get("priceUSD", item.get("priceUsd", 0)))
        ))
    return tokens


def find_by_symbol(tokens: List[Token], symbol: str) -> Optional[Token]:
    wanted = symbol.lower()
    for token in tokens:
        if token.symbol.lower() == wanted:
            return token
    return None


class TokenStore:
    def __init__(
            self,
            path: Optional[str] = None,
            url: Optional[str] = None,
            ttl: Optional[int] = None,
            http: Optional[HttpJsonClient] = None
    ):
        """Token catalog backed by a token-list file or URL, cached for `ttl` seconds"""
        self.path = Path(path or settings.TOKEN_LIST_PATH)
        self.url = url if url is not None else settings.TOKEN_LIST_URL
        self.ttl = ttl if ttl is not None else settings.TOKEN_LIST_TTL
        self.http = http
        self._cache: ExpiringCache[List[Token]] = ExpiringCache("token-list")

    async def initialize(self):
        """Warm the catalog cache"""
        tokens = await self.get_all_tokens()
        logger.info(f"Token catalog ready with {len(tokens)} tokens")

    async def _fetch(self) -> Tuple[List[Token], float]:
        if self.url:
            if self.http is None:
                self.http = HttpJsonClient()
            logger.info(f"Fetching token list from {self.url}")
            raw = await self.http.get_json(self.url)
        else:
            logger.info(f"Loading token list from {self.path}")
            content = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            raw = json.loads(content)
        return normalize_token_list(raw), time.time() + self.ttl

    async def _load_catalog(self) -> Optional[List[Token]]:
        try:
            return await self._cache.get_or_refresh(self._fetch)
        except Exception as e:
            logger.error(f"Error loading token catalog: {str(e)}")
            return None

    async def get_all_tokens(self) -> List[Token]:
        """Get the catalog, or the built-in tokens if it cannot be loaded"""
        tokens = await self._load_catalog()
        if not tokens:
            return list(FALLBACK_TOKENS)
        return tokens

    async def get_token(self, symbol: str) -> Optional[Token]:
        """Get a token by symbol (case-insensitive), falling back to the built-in table"""
        tokens = await self._load_catalog() or []
        return find_by_symbol(tokens, symbol) or find_by_symbol(FALLBACK_TOKENS, symbol)

    async def resolve(self, symbol: str) -> Token:
        token = await self.get_token(symbol)
        if token is None:
            raise UnsupportedTokenError(symbol)
        return token

    async def aclose(self):
        if self.http is not None:
            await self.http.aclose()
