"""Solana JSON-RPC access and transaction building.

Only the three RPC methods the payment flow needs are wrapped:
getLatestBlockhash, sendTransaction and getSignatureStatuses.
"""
import asyncio
import base64
import itertools
import logging
import time
from decimal import Decimal, ROUND_DOWN
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx
from solders.hash import Hash
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID, TransferParams, transfer
from solders.transaction import Transaction as SolanaTransaction, VersionedTransaction

from config.settings import settings
from core.errors import SubmissionFailed, ConfirmationTimeout

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000
SOL_DECIMALS = 9
CONFIRMED_LEVELS = ("confirmed", "finalized")
SYSTEM_TRANSFER_INDEX = 2


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Scale a human amount to integer base units, truncating dust"""
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def build_transfer_transaction(payer: Pubkey, recipient: Pubkey, lamports: int, blockhash: str) -> bytes:
    """Unsigned native SOL transfer with `payer` as fee payer"""
    instruction = transfer(TransferParams(from_pubkey=payer, to_pubkey=recipient, lamports=lamports))
    message = Message.new_with_blockhash([instruction], payer, Hash.from_string(blockhash))
    return bytes(SolanaTransaction.new_unsigned(message))


@dataclass
class TransferDetails:
    fee_payer: Pubkey
    source: Pubkey
    recipient: Pubkey
    lamports: int


def decode_transfer(raw: bytes) -> TransferDetails:
    """Read back a transaction holding exactly one system program transfer.

    Raises ValueError for anything else.
    """
    message = VersionedTransaction.from_bytes(raw).message
    keys = message.account_keys
    if len(message.instructions) != 1:
        raise ValueError("expected exactly one instruction")
    instruction = message.instructions[0]
    if keys[instruction.program_id_index] != SYSTEM_PROGRAM_ID:
        raise ValueError("instruction is not a system program call")
    data = bytes(instruction.data)
    accounts = list(instruction.accounts)
    if len(data) != 12 or int.from_bytes(data[:4], "little") != SYSTEM_TRANSFER_INDEX or len(accounts) != 2:
        raise ValueError("instruction is not a transfer")
    return TransferDetails(
        fee_payer=keys[0],
        source=keys[accounts[0]],
        recipient=keys[accounts[1]],
        lamports=int.from_bytes(data[4:12], "little"),
    )


class SolanaRPC:
    def __init__(
        self,
        url: str,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        confirm_timeout: float = settings.CONFIRM_TIMEOUT_SECONDS,
        poll_interval: float = settings.CONFIRM_POLL_INTERVAL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.confirm_timeout = confirm_timeout
        self.poll_interval = poll_interval
        self._transport = transport
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"RPC {method} failed against {self.url}: {e}")
            raise SubmissionFailed(f"Failed to process payment: {e}")

        if body.get("error"):
            message = body["error"].get("message", "RPC error")
            logger.error(f"RPC {method} returned error: {message}")
            raise SubmissionFailed(f"Failed to process payment: {message}")
        return body.get("result")

    async def get_latest_blockhash(self) -> str:
        result = await self._call("getLatestBlockhash", [{"commitment": "confirmed"}])
        return result["value"]["blockhash"]

    async def send_transaction(self, signed: bytes) -> str:
        encoded = base64.b64encode(signed).decode("ascii")
        signature = await self._call(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": "confirmed"}],
        )
        logger.info(f"Submitted transaction {signature}")
        return signature

    async def confirm_transaction(self, signature: str) -> None:
        """Poll until the signature reaches `confirmed`; no resubmission"""
        deadline = time.monotonic() + self.confirm_timeout
        while True:
            try:
                result = await self._call("getSignatureStatuses", [[signature]])
            except SubmissionFailed as e:
                raise ConfirmationTimeout() from e

            status = (result or {}).get("value", [None])[0]
            if status:
                if status.get("err"):
                    logger.error(f"Transaction {signature} failed on-chain: {status['err']}")
                    raise SubmissionFailed(f"Failed to process payment: transaction error {status['err']}")
                if status.get("confirmationStatus") in CONFIRMED_LEVELS:
                    logger.info(f"Transaction {signature} {status['confirmationStatus']}")
                    return

            if time.monotonic() >= deadline:
                logger.warning(f"Transaction {signature} not confirmed after {self.confirm_timeout}s")
                raise ConfirmationTimeout()
            await asyncio.sleep(self.poll_interval)

    async def send_and_confirm(self, signed: bytes) -> str:
        signature = await self.send_transaction(signed)
        await self.confirm_transaction(signature)
        return signature


def get_rpc(network: str) -> SolanaRPC:
    return SolanaRPC(settings.rpc_url_for(network))
