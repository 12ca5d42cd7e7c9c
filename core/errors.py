"""Error taxonomy for the payment flow.

Every error carries the HTTP status it maps to and a short machine code; the
handlers in main.py turn them into the standard response envelope.
"""
from typing import Optional


class PaymentError(Exception):
    status_code = 500
    code = "payment_error"
    default_message = "Failed to process payment. Please try again."

    def __init__(self, message: Optional[str] = None, transfer_signature: Optional[str] = None):
        self.message = message or self.default_message
        # Set when funds already moved on-chain before this error was raised
        self.transfer_signature = transfer_signature
        super().__init__(self.message)


class NotFound(PaymentError):
    status_code = 404
    code = "not_found"
    default_message = "Invalid payment link"


class LinkInactive(PaymentError):
    status_code = 410
    code = "link_inactive"
    default_message = "This payment link is no longer active"


class UnsupportedToken(PaymentError):
    status_code = 400
    code = "unsupported_token"
    default_message = "This token is not accepted"


class TokenCatalogUnavailable(PaymentError):
    status_code = 502
    code = "token_catalog_unavailable"
    default_message = "Failed to load the accepted token list"


class WalletError(PaymentError):
    status_code = 400
    code = "wallet_error"


class WalletNotInstalled(WalletError):
    code = "wallet_not_installed"
    default_message = "Phantom wallet is not installed. Please install it first."


class WalletConnectionRejected(WalletError):
    code = "wallet_connection_rejected"
    default_message = "Failed to connect to wallet. Please try again."


class WalletNotConnected(WalletError):
    code = "wallet_not_connected"
    default_message = "Wallet is not connected. Please connect your wallet first."


class SubmissionFailed(PaymentError):
    status_code = 502
    code = "submission_failed"
    default_message = "Failed to process payment. Please try again."


class ConfirmationTimeout(PaymentError):
    status_code = 504
    code = "confirmation_timeout"
    default_message = "Payment was sent but not confirmed. Please check your wallet for details."


class InvalidTransaction(PaymentError):
    status_code = 422
    code = "invalid_transaction"
    default_message = "The signed transaction does not match this payment"


class TransferAlreadySubmitted(PaymentError):
    status_code = 409
    code = "transfer_already_submitted"
    default_message = "The transfer for this payment was already submitted"


class TransferNotConfirmed(PaymentError):
    status_code = 409
    code = "transfer_not_confirmed"
    default_message = "Submit and confirm the transfer before the swap"


class AggregatorError(PaymentError):
    status_code = 502
    code = "aggregator_error"
    default_message = "Failed to swap tokens. Please try again."


class PersistenceError(PaymentError):
    status_code = 500
    code = "persistence_error"
    default_message = "Failed to save the transaction record"
