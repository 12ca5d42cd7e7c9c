import httpx
import logging
from functools import lru_cache
from typing import List, Optional, Dict

from config.settings import settings
from core.errors import TokenCatalogUnavailable, UnsupportedToken
from schemas.payment import TokenInfo

logger = logging.getLogger(__name__)

MAINNET_CHAIN_ID = 101


class TokenCatalog:
    """Accepted tokens, read from the public Solana token list.

    Only mainnet-beta entries whose symbol is on the allow-list are kept. The
    list is fetched once per catalog instance.
    """

    def __init__(
        self,
        list_url: str = settings.TOKEN_LIST_URL,
        accepted: Optional[List[str]] = None,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.list_url = list_url
        self.accepted = [s.upper() for s in (accepted or settings.ACCEPTED_TOKENS)]
        self.timeout = timeout
        self._transport = transport
        self._tokens: Optional[List[TokenInfo]] = None

    async def _fetch(self) -> List[Dict]:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(self.list_url)
            response.raise_for_status()
            return response.json().get("tokens", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Token list fetch failed: {e}")
            raise TokenCatalogUnavailable()

    async def list_tokens(self) -> List[TokenInfo]:
        if self._tokens is not None:
            return self._tokens

        raw = await self._fetch()
        by_symbol: Dict[str, TokenInfo] = {}
        for entry in raw:
            symbol = (entry.get("symbol") or "").upper()
            if entry.get("chainId") != MAINNET_CHAIN_ID or symbol not in self.accepted:
                continue
            # The list carries look-alike tokens; keep the first entry per symbol
            if symbol in by_symbol:
                continue
            by_symbol[symbol] = TokenInfo(
                symbol=symbol,
                name=entry.get("name", symbol),
                address=entry["address"],
                decimals=int(entry.get("decimals", 0)),
                logo_uri=entry.get("logoURI"),
            )

        # Keep allow-list order
        self._tokens = [by_symbol[s] for s in self.accepted if s in by_symbol]
        logger.info("Token catalog loaded: %s", ", ".join(t.symbol for t in self._tokens))
        return self._tokens

    async def get_token(self, symbol: str) -> TokenInfo:
        symbol = symbol.upper()
        for token in await self.list_tokens():
            if token.symbol == symbol:
                return token
        raise UnsupportedToken(f"Token {symbol} is not accepted")


@lru_cache(maxsize=1)
def get_token_catalog() -> TokenCatalog:
    """Process-wide catalog so the token list is fetched once"""
    return TokenCatalog()
