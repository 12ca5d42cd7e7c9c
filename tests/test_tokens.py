"""Token catalog built from the public Solana token list."""
import httpx
import pytest

from conftest import MINTS, token_list_handler
from core.errors import UnsupportedToken, TokenCatalogUnavailable
from core.tokens import TokenCatalog


@pytest.mark.asyncio
async def test_keeps_mainnet_allow_listed_tokens_in_order(catalog):
    tokens = await catalog.list_tokens()

    assert [t.symbol for t in tokens] == ["SOL", "USDC", "RAY", "SRM", "FIDA"]
    usdc = tokens[1]
    assert usdc.address == MINTS["USDC"]
    assert usdc.decimals == 6
    assert usdc.logo_uri == "https://example.com/usdc.png"


@pytest.mark.asyncio
async def test_list_is_fetched_once():
    requests = []

    def handler(request):
        requests.append(request)
        return token_list_handler(request)

    catalog = TokenCatalog(transport=httpx.MockTransport(handler))
    await catalog.list_tokens()
    await catalog.get_token("RAY")
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_get_token_is_case_insensitive(catalog):
    token = await catalog.get_token("ray")
    assert token.symbol == "RAY"
    assert token.address == MINTS["RAY"]


@pytest.mark.asyncio
async def test_unknown_symbol_rejected(catalog):
    with pytest.raises(UnsupportedToken):
        await catalog.get_token("BONK")


@pytest.mark.asyncio
async def test_custom_allow_list():
    catalog = TokenCatalog(accepted=["usdc", "sol"], transport=httpx.MockTransport(token_list_handler))
    assert [t.symbol for t in await catalog.list_tokens()] == ["USDC", "SOL"]


@pytest.mark.asyncio
async def test_fetch_failure():
    catalog = TokenCatalog(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    with pytest.raises(TokenCatalogUnavailable):
        await catalog.list_tokens()


@pytest.mark.asyncio
async def test_missing_tokens_key_yields_empty_catalog():
    catalog = TokenCatalog(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"name": "x"})))
    assert await catalog.list_tokens() == []
