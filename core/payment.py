"""Customer payment flow.

Order for one attempt: validate link -> merchant lookup -> token resolution ->
wallet connect -> pending record -> SOL transfer -> optional swap into the
merchant's settlement token -> completed record. Nothing is retried and
nothing is rolled back; a confirmed transfer stands even if later steps fail.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple, List

from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction
from sqlalchemy.orm import Session

from config.settings import settings
from core.errors import (
    PaymentError, NotFound, LinkInactive, SubmissionFailed, WalletError, WalletNotConnected,
    InvalidTransaction, TransferAlreadySubmitted, TransferNotConfirmed,
)
from core.recorder import TransactionRecorder
from core.solana import (
    SolanaRPC, get_rpc, build_transfer_transaction, decode_transfer, to_base_units, SOL_DECIMALS,
)
from core.swap import JupiterClient
from core.tokens import TokenCatalog, get_token_catalog
from core.wallet import WalletAdapter, connect_wallet
from crud.merchant import get_merchant_by_id
from crud.payment_link import get_payment_link_by_id
from crud.transaction import get_transaction_by_id
from models.merchant import Merchant
from models.payment_link import PaymentLink
from models.transaction import Transaction
from schemas.payment import TokenInfo

logger = logging.getLogger(__name__)

# Jupiter only routes on mainnet, so swaps are always submitted there
SWAP_NETWORK = "mainnet"


@dataclass
class PaymentResult:
    transaction_id: str
    transaction_signature: str
    swap_signature: Optional[str]
    redirect_url: str


@dataclass
class TransferOutcome:
    transaction: Transaction
    transaction_signature: str
    swap_required: bool
    quote: Optional[Dict[str, Any]] = None
    swap_transaction: Optional[bytes] = None


def needs_swap(token: str, preferred_token: str) -> bool:
    return token.upper() != preferred_token.upper()


def success_path(link_id: str, signature: str) -> str:
    return f"/pay/{link_id}/success?tx={signature}"


def explorer_url(signature: str, network: str) -> str:
    url = f"{settings.EXPLORER_BASE_URL}/tx/{signature}"
    if network != "mainnet":
        url += "?cluster=devnet"
    return url


def validate_payment_link(db: Session, link_id: str) -> PaymentLink:
    link = get_payment_link_by_id(db, link_id)
    if not link:
        raise NotFound()
    if link.status != "active":
        raise LinkInactive()
    return link


def fee_payer_of(signed: bytes) -> Pubkey:
    """First account key of a serialized transaction is its fee payer"""
    try:
        return VersionedTransaction.from_bytes(signed).message.account_keys[0]
    except Exception as e:
        raise InvalidTransaction("Invalid signed transaction") from e


def verify_transfer(signed: bytes, payer: Pubkey, recipient: Pubkey, lamports: int) -> None:
    """The signed transfer must be exactly the one handed out for this payment"""
    try:
        details = decode_transfer(signed)
    except Exception as e:
        raise InvalidTransaction("Signed transaction is not a single SOL transfer") from e
    if details.fee_payer != payer or details.source != payer:
        raise InvalidTransaction("Transfer is not paid from the wallet that started this payment")
    if details.recipient != recipient:
        raise InvalidTransaction("Transfer does not pay the merchant wallet")
    if details.lamports != lamports:
        raise InvalidTransaction(f"Transfer amount must be {lamports} lamports")


class PaymentProcessor:
    def __init__(
        self,
        db: Session,
        catalog: TokenCatalog,
        aggregator: JupiterClient,
        rpc_factory: Callable[[str], SolanaRPC] = get_rpc,
        slippage: float = settings.DEFAULT_SLIPPAGE_PERCENT,
    ):
        self.db = db
        self.catalog = catalog
        self.aggregator = aggregator
        self.rpc_factory = rpc_factory
        self.slippage = slippage
        self.recorder = TransactionRecorder(db)

    # ---------------- lookups ----------------

    def load_checkout(self, link_id: str) -> Tuple[PaymentLink, Merchant]:
        link = validate_payment_link(self.db, link_id)
        merchant = get_merchant_by_id(self.db, link.merchant_id)
        if not merchant:
            raise NotFound("Merchant not found")
        return link, merchant

    async def checkout(self, link_id: str) -> Tuple[PaymentLink, Merchant, List[TokenInfo]]:
        link, merchant = self.load_checkout(link_id)
        tokens = await self.catalog.list_tokens()
        return link, merchant, tokens

    def _pending_record(self, link_id: str, transaction_id: str) -> Transaction:
        self.db.expire_all()
        record = get_transaction_by_id(self.db, transaction_id)
        if not record or record.payment_link_id != link_id or record.status != "pending":
            raise NotFound("Transaction not found or not eligible for payment")
        return record

    # ---------------- on-chain steps ----------------

    async def build_transfer(self, payer: Pubkey, merchant: Merchant, amount: Decimal) -> bytes:
        rpc = self.rpc_factory(merchant.network)
        blockhash = await rpc.get_latest_blockhash()
        lamports = to_base_units(amount, SOL_DECIMALS)
        recipient = Pubkey.from_string(merchant.wallet_address)
        return build_transfer_transaction(payer, recipient, lamports, blockhash)

    async def submit(self, signed: bytes, network: str) -> str:
        return await self.rpc_factory(network).send_and_confirm(signed)

    async def prepare_swap(
        self, payer: Pubkey, token: str, target_token: str, amount: Decimal
    ) -> Tuple[Dict[str, Any], bytes]:
        source = await self.catalog.get_token(token)
        target = await self.catalog.get_token(target_token)
        quote = await self.aggregator.get_quote(
            source.address, target.address, to_base_units(amount, source.decimals), self.slippage
        )
        swap_transaction = await self.aggregator.get_swap_transaction(quote, str(payer))
        logger.info(f"Swap quote {source.symbol}->{target.symbol}: out={quote.get('outAmount')}")
        return quote, swap_transaction

    async def _sign(self, wallet: WalletAdapter, unsigned: bytes) -> bytes:
        try:
            return await wallet.sign_transaction(unsigned)
        except WalletError:
            raise
        except Exception as e:
            logger.error(f"Wallet failed to sign transaction: {e}")
            raise SubmissionFailed("Transaction was not signed by the wallet") from e

    async def submit_payment(self, wallet: WalletAdapter, merchant: Merchant, amount: Decimal) -> str:
        """Transfer `amount` SOL from the connected wallet to the merchant"""
        if not wallet.is_connected:
            raise WalletNotConnected()
        unsigned = await self.build_transfer(wallet.public_key, merchant, amount)
        signed = await self._sign(wallet, unsigned)
        return await self.submit(signed, merchant.network)

    async def execute_swap(self, wallet: WalletAdapter, token: str, target_token: str, amount: Decimal) -> str:
        _, unsigned = await self.prepare_swap(wallet.public_key, token, target_token, amount)
        signed = await self._sign(wallet, unsigned)
        return await self.submit(signed, SWAP_NETWORK)

    def _flag_partial(self, transaction_id: str, transfer_signature: str, error: PaymentError) -> None:
        # Funds already moved; leave the record pending for manual reconciliation
        error.transfer_signature = transfer_signature
        logger.error(
            f"Transfer {transfer_signature} confirmed but transaction {transaction_id} "
            f"left pending: {error.message}"
        )

    # ---------------- in-process flow ----------------

    async def process(self, link_id: str, token_symbol: str, wallet: Optional[WalletAdapter]) -> PaymentResult:
        link, merchant = self.load_checkout(link_id)
        token = await self.catalog.get_token(token_symbol)
        public_key = await connect_wallet(wallet)

        record = self.recorder.create_pending(link, merchant, token.symbol, payer=str(public_key))
        transfer_signature = await self.submit_payment(wallet, merchant, link.amount)

        swap_signature = None
        try:
            if needs_swap(token.symbol, merchant.preferred_token):
                self.recorder.mark_transferred(record.id, transfer_signature)
                swap_signature = await self.execute_swap(wallet, token.symbol, merchant.preferred_token, link.amount)
            self.recorder.complete(record.id, transfer_signature, swap_signature)
        except PaymentError as e:
            self._flag_partial(record.id, transfer_signature, e)
            raise

        logger.info(f"Payment {record.id} completed for link {link_id}")
        return PaymentResult(
            transaction_id=record.id,
            transaction_signature=transfer_signature,
            swap_signature=swap_signature,
            redirect_url=success_path(link_id, transfer_signature),
        )

    # ---------------- browser relay flow ----------------

    async def start_relay(self, link_id: str, token_symbol: str, payer: Pubkey) -> Tuple[Transaction, bytes, bool]:
        """Create the pending record and hand back the unsigned transfer"""
        link, merchant = self.load_checkout(link_id)
        token = await self.catalog.get_token(token_symbol)
        record = self.recorder.create_pending(link, merchant, token.symbol, payer=str(payer))
        unsigned = await self.build_transfer(payer, merchant, link.amount)
        return record, unsigned, needs_swap(token.symbol, merchant.preferred_token)

    async def submit_relay_transfer(self, link_id: str, transaction_id: str, signed: bytes) -> TransferOutcome:
        record = self._pending_record(link_id, transaction_id)
        if record.transaction_signature:
            raise TransferAlreadySubmitted(transfer_signature=record.transaction_signature)
        merchant = get_merchant_by_id(self.db, record.merchant_id)
        if not merchant:
            raise NotFound("Merchant not found")
        payer = self._record_payer(record)
        verify_transfer(
            signed,
            payer,
            Pubkey.from_string(merchant.wallet_address),
            to_base_units(record.amount, SOL_DECIMALS),
        )

        transfer_signature = await self.submit(signed, merchant.network)
        try:
            if not needs_swap(record.token, record.target_token):
                self.recorder.complete(record.id, transfer_signature)
                return TransferOutcome(record, transfer_signature, swap_required=False)

            self.recorder.mark_transferred(record.id, transfer_signature)
            quote, swap_transaction = await self.prepare_swap(payer, record.token, record.target_token, record.amount)
        except PaymentError as e:
            self._flag_partial(record.id, transfer_signature, e)
            raise
        return TransferOutcome(record, transfer_signature, True, quote, swap_transaction)

    async def submit_relay_swap(self, link_id: str, transaction_id: str, signed: bytes) -> PaymentResult:
        record = self._pending_record(link_id, transaction_id)
        transfer_signature = record.transaction_signature
        if not transfer_signature:
            raise TransferNotConfirmed()
        if fee_payer_of(signed) != self._record_payer(record):
            raise InvalidTransaction(
                "Swap is not paid from the wallet that started this payment",
                transfer_signature=transfer_signature,
            )

        try:
            swap_signature = await self.submit(signed, SWAP_NETWORK)
            self.recorder.complete(record.id, transfer_signature, swap_signature)
        except PaymentError as e:
            self._flag_partial(record.id, transfer_signature, e)
            raise
        return PaymentResult(
            transaction_id=record.id,
            transaction_signature=transfer_signature,
            swap_signature=swap_signature,
            redirect_url=success_path(link_id, transfer_signature),
        )

    @staticmethod
    def _record_payer(record: Transaction) -> Pubkey:
        if not record.payer:
            raise NotFound("Transaction not found or not eligible for payment")
        return Pubkey.from_string(record.payer)


def get_payment_processor(db: Session) -> PaymentProcessor:
    return PaymentProcessor(db, get_token_catalog(), JupiterClient())
