"""Jupiter quote/swap client."""
import base64
import json

import httpx
import pytest

from conftest import MINTS
from core.errors import AggregatorError
from core.swap import JupiterClient


def _client(handler):
    return JupiterClient(base_url="https://quote-api.jup.ag/v6/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_quote_parameters():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"outAmount": "990000"})

    quote = await _client(handler).get_quote(MINTS["SOL"], MINTS["USDC"], 1_000_000_000, slippage=0.5)

    assert quote == {"outAmount": "990000"}
    assert seen["path"] == "/v6/quote"
    assert seen["params"] == {
        "inputMint": MINTS["SOL"],
        "outputMint": MINTS["USDC"],
        "amount": "1000000000",
        "slippageBps": "50",
    }


@pytest.mark.asyncio
async def test_swap_transaction_is_decoded():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"swapTransaction": base64.b64encode(b"raw-tx").decode()})

    quote = {"outAmount": "1"}
    raw = await _client(handler).get_swap_transaction(quote, "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin")

    assert raw == b"raw-tx"
    assert seen["body"] == {
        "quoteResponse": quote,
        "userPublicKey": "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin",
        "wrapAndUnwrapSol": True,
    }


@pytest.mark.asyncio
async def test_quote_error_status():
    client = _client(lambda request: httpx.Response(400, json={"error": "Could not find any route"}))
    with pytest.raises(AggregatorError):
        await client.get_quote(MINTS["SOL"], MINTS["USDC"], 1)


@pytest.mark.asyncio
async def test_swap_without_transaction():
    client = _client(lambda request: httpx.Response(200, json={}))
    with pytest.raises(AggregatorError):
        await client.get_swap_transaction({}, "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin")


@pytest.mark.asyncio
async def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AggregatorError):
        await _client(handler).get_quote(MINTS["SOL"], MINTS["USDC"], 1)
