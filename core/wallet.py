"""Wallet adapters.

The payment flow only needs what a browser wallet extension exposes: connect,
sign a transaction, sign a message. `KeypairWallet` implements that surface
with a local keypair for scripts and devnet testing.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from core.errors import WalletNotInstalled, WalletConnectionRejected, WalletError

logger = logging.getLogger(__name__)


class WalletAdapter:
    installed = True

    def __init__(self):
        self._public_key: Optional[Pubkey] = None

    @property
    def public_key(self) -> Optional[Pubkey]:
        return self._public_key

    @property
    def is_connected(self) -> bool:
        return self._public_key is not None

    async def connect(self) -> Pubkey:
        raise NotImplementedError

    async def disconnect(self) -> None:
        self._public_key = None

    async def sign_transaction(self, payload: bytes) -> bytes:
        """Take a serialized unsigned transaction, return it signed"""
        raise NotImplementedError

    async def sign_message(self, message: bytes) -> bytes:
        raise NotImplementedError


class KeypairWallet(WalletAdapter):
    def __init__(self, keypair: Keypair):
        super().__init__()
        self._keypair = keypair

    @classmethod
    def from_file(cls, path: str) -> "KeypairWallet":
        """Load a Solana CLI keypair file (JSON array of 64 bytes)"""
        secret = json.loads(Path(path).expanduser().read_text())
        return cls(Keypair.from_bytes(bytes(secret)))

    @classmethod
    def from_base58(cls, secret: str) -> "KeypairWallet":
        return cls(Keypair.from_base58_string(secret))

    async def connect(self) -> Pubkey:
        self._public_key = self._keypair.pubkey()
        return self._public_key

    async def sign_transaction(self, payload: bytes) -> bytes:
        unsigned = VersionedTransaction.from_bytes(payload)
        signed = VersionedTransaction(unsigned.message, [self._keypair])
        return bytes(signed)

    async def sign_message(self, message: bytes) -> bytes:
        return bytes(self._keypair.sign_message(message))


async def connect_wallet(wallet: Optional[WalletAdapter]) -> Pubkey:
    """One-shot connect handshake; the wallet owns the session afterwards"""
    if wallet is None or not wallet.installed:
        raise WalletNotInstalled()
    try:
        public_key = await wallet.connect()
    except WalletError:
        raise
    except Exception as e:
        logger.error(f"Error connecting to wallet: {e}")
        raise WalletConnectionRejected() from e
    logger.info(f"Wallet connected: {public_key}")
    return public_key
