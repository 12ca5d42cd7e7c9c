"""Pay a payment link from the command line with a local keypair.

Usage examples:
  python -m scripts.pay_link <link_id> --token SOL --keypair ~/.config/solana/id.json
  python scripts/pay_link.py <link_id> --token RAY --keypair devnet-payer.json

Runs the same in-process flow the checkout uses (validate link, connect wallet,
pending record, SOL transfer, optional swap, completed record) against the
database and RPC endpoints configured in .env. Meant for devnet testing.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from project root or scripts folder
CURRENT_DIR = Path(__file__).resolve().parent
BACKEND_ROOT = CURRENT_DIR.parent
sys.path.append(str(BACKEND_ROOT))

from db.session import SessionLocal, create_tables  # type: ignore
from core.errors import PaymentError  # type: ignore
from core.payment import get_payment_processor, explorer_url, SWAP_NETWORK  # type: ignore
from core.wallet import KeypairWallet  # type: ignore

logger = logging.getLogger("pay_link")
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


async def pay(link_id: str, token: str, keypair_path: str) -> int:
    wallet = KeypairWallet.from_file(keypair_path)
    db = SessionLocal()
    try:
        processor = get_payment_processor(db)
        result = await processor.process(link_id, token, wallet)
    except PaymentError as e:
        logger.error("%s: %s", e.code, e.message)
        if e.transfer_signature:
            logger.error("Transfer %s already confirmed; record left pending", e.transfer_signature)
        return 1
    finally:
        db.close()

    logger.info("Transaction %s completed", result.transaction_id)
    logger.info("Transfer signature: %s", result.transaction_signature)
    if result.swap_signature:
        logger.info("Swap signature: %s (%s)", result.swap_signature, explorer_url(result.swap_signature, SWAP_NETWORK))
    logger.info("Receipt: %s", result.redirect_url)
    return 0


def main():
    parser = argparse.ArgumentParser(description="Pay a SolPay payment link with a local keypair")
    parser.add_argument('link_id', help='Payment link id')
    parser.add_argument('--token', default='SOL', help='Token symbol to pay with (SOL, USDC, RAY, SRM, FIDA)')
    parser.add_argument('--keypair', required=True, help='Path to a Solana CLI keypair JSON file')
    parser.add_argument('--create-tables', action='store_true', help='Create missing tables before paying')
    args = parser.parse_args()

    if args.create_tables:
        create_tables()

    sys.exit(asyncio.run(pay(args.link_id, args.token, args.keypair)))


if __name__ == '__main__':
    main()
