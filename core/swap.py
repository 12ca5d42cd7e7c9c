import base64
import httpx
import logging
from typing import Any, Dict, Optional

from config.settings import settings
from core.errors import AggregatorError

logger = logging.getLogger(__name__)


class JupiterClient:
    """Quote and prebuilt swap transactions from the Jupiter aggregator"""

    def __init__(
        self,
        base_url: str = settings.JUPITER_API_URL,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage: float = settings.DEFAULT_SLIPPAGE_PERCENT,
    ) -> Dict[str, Any]:
        """Best-route quote for `amount` base units of `input_mint`"""
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": amount,
            "slippageBps": int(round(slippage * 100)),
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/quote", params=params)
        except httpx.HTTPError as e:
            logger.error(f"Jupiter quote request failed: {e}")
            raise AggregatorError()

        if response.status_code != 200:
            logger.error(f"Jupiter quote failed: {response.status_code} {response.text[:500]}")
            raise AggregatorError()
        return response.json()

    async def get_swap_transaction(self, quote: Dict[str, Any], user_public_key: str) -> bytes:
        """Unsigned swap transaction implementing `quote` for `user_public_key`"""
        payload = {
            "quoteResponse": quote,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}/swap", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Jupiter swap request failed: {e}")
            raise AggregatorError()

        if response.status_code != 200:
            logger.error(f"Jupiter swap failed: {response.status_code} {response.text[:500]}")
            raise AggregatorError()

        swap_transaction = response.json().get("swapTransaction")
        if not swap_transaction:
            logger.error("Jupiter swap response missing swapTransaction")
            raise AggregatorError()
        return base64.b64decode(swap_transaction)
