"""Pytest fixtures: test client, in-memory DB, fake Solana RPC / Jupiter / token list."""
import os
import base64
import json
import time
from decimal import Decimal

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from jose import jwt
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction
from sqlalchemy.orm import Session

# In-memory SQLite and a known JWT secret; must be set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"

from main import app  # noqa: E402
from config.settings import settings  # noqa: E402
from db.base import Base  # noqa: E402
from db.session import SessionLocal, engine, create_tables, get_db  # noqa: E402
from api.payment import get_processor  # noqa: E402
from core.payment import PaymentProcessor  # noqa: E402
from core.solana import SolanaRPC, build_transfer_transaction  # noqa: E402
from core.swap import JupiterClient  # noqa: E402
from core.tokens import TokenCatalog  # noqa: E402
from models.merchant import Merchant  # noqa: E402
from models.payment_link import PaymentLink  # noqa: E402

MERCHANT_ID = "7b0c3f0e-2f1e-4c57-9a43-1f4f3f0c2a11"
OTHER_MERCHANT_ID = "2d7e5b8a-9c41-4f0b-8e3d-6a5b4c3d2e1f"
BLOCKHASH = str(Hash.default())

MINTS = {
    "SOL": "So11111111111111111111111111111111111111112",
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "RAY": "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
    "SRM": "SRMuApVNdxXokk5GT7XD5cUUgXMBCoAz2LHeuAoKWRt",
    "FIDA": "EchesyfXePKdLtoiZSL8pBe8Myagyy8ZRqsACNCFGnvp",
}

TOKEN_LIST = {
    "name": "Solana Token List",
    "tokens": [
        {"chainId": 101, "address": MINTS["USDC"], "symbol": "USDC", "name": "USD Coin", "decimals": 6,
         "logoURI": "https://example.com/usdc.png"},
        {"chainId": 103, "address": "Gh9ZwEmdLJ8DscKNTkTqPbNwLNNBjuSzaG9Vp2KGtKJr", "symbol": "USDC",
         "name": "USD Coin (devnet)", "decimals": 6},
        {"chainId": 101, "address": MINTS["RAY"], "symbol": "RAY", "name": "Raydium", "decimals": 6},
        {"chainId": 101, "address": MINTS["SOL"], "symbol": "SOL", "name": "Wrapped SOL", "decimals": 9},
        {"chainId": 101, "address": "BXXkv6z8ykpG1yuvUDPgh732wzVHB69RnB9YgSYh3itW", "symbol": "USDC",
         "name": "Wrapped USDC", "decimals": 6},
        {"chainId": 101, "address": MINTS["SRM"], "symbol": "SRM", "name": "Serum", "decimals": 6},
        {"chainId": 101, "address": MINTS["FIDA"], "symbol": "FIDA", "name": "Bonfida", "decimals": 6},
        {"chainId": 101, "address": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "symbol": "BONK",
         "name": "Bonk", "decimals": 5},
    ],
}


def make_token(sub: str = MERCHANT_ID, secret: str = "test-jwt-secret", **claims) -> str:
    payload = {"sub": sub, "aud": "authenticated", "exp": int(time.time()) + 3600, "role": "authenticated"}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def sign(unsigned_b64: str, keypair: Keypair) -> str:
    """What the browser wallet does with an unsigned transaction"""
    unsigned = VersionedTransaction.from_bytes(base64.b64decode(unsigned_b64))
    return base64.b64encode(bytes(VersionedTransaction(unsigned.message, [keypair]))).decode()


class FakeChain:
    """Solana JSON-RPC stand-in; every submitted transaction confirms immediately"""

    def __init__(self):
        self.sent = []  # (rpc url, raw transaction bytes)
        self.calls = []  # (rpc url, method)
        self.statuses = {}  # signature -> status override

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        url = str(request.url)
        self.calls.append((url, method))

        if method == "getLatestBlockhash":
            result = {"context": {"slot": 1}, "value": {"blockhash": BLOCKHASH, "lastValidBlockHeight": 100}}
        elif method == "sendTransaction":
            raw = base64.b64decode(body["params"][0])
            self.sent.append((url, raw))
            result = str(VersionedTransaction.from_bytes(raw).signatures[0])
        elif method == "getSignatureStatuses":
            signature = body["params"][0][0]
            status = self.statuses.get(signature, {"confirmationStatus": "confirmed", "err": None})
            result = {"context": {"slot": 2}, "value": [status]}
        else:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"],
                                             "error": {"code": -32601, "message": "Method not found"}})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def rpc(self, network: str) -> SolanaRPC:
        return SolanaRPC(
            settings.rpc_url_for(network),
            confirm_timeout=0.2,
            poll_interval=0,
            transport=httpx.MockTransport(self.handler),
        )

    def sent_to(self, network: str):
        url = settings.rpc_url_for(network)
        return [raw for sent_url, raw in self.sent if sent_url.rstrip("/") == url.rstrip("/")]


class FakeJupiter:
    """Jupiter v6 stand-in; the swap transaction is a tiny transfer paid by the user"""

    def __init__(self):
        self.quotes = []
        self.swaps = []
        self.fail_with = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail_with:
            return httpx.Response(self.fail_with, json={"error": "route not found"})
        if request.url.path.endswith("/quote"):
            params = dict(request.url.params)
            self.quotes.append(params)
            return httpx.Response(200, json={
                "inputMint": params["inputMint"],
                "outputMint": params["outputMint"],
                "inAmount": params["amount"],
                "outAmount": "4120000",
                "slippageBps": int(params["slippageBps"]),
                "routePlan": [],
            })
        if request.url.path.endswith("/swap"):
            body = json.loads(request.content)
            self.swaps.append(body)
            user = Pubkey.from_string(body["userPublicKey"])
            raw = build_transfer_transaction(user, Keypair().pubkey(), 5000, BLOCKHASH)
            return httpx.Response(200, json={
                "swapTransaction": base64.b64encode(raw).decode(),
                "lastValidBlockHeight": 100,
            })
        return httpx.Response(404)


def token_list_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=TOKEN_LIST)


@pytest.fixture(autouse=True)
def _clean_tables():
    create_tables()
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client():
    """TestClient; lifespan creates the tables."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_auth_headers():
    return {"Authorization": f"Bearer {make_token(OTHER_MERCHANT_ID)}"}


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def jupiter():
    return FakeJupiter()


@pytest.fixture
def catalog():
    return TokenCatalog(transport=httpx.MockTransport(token_list_handler))


@pytest.fixture
def aggregator(jupiter):
    return JupiterClient(transport=httpx.MockTransport(jupiter.handler))


@pytest.fixture
def processor(db, catalog, aggregator, chain):
    return PaymentProcessor(db, catalog, aggregator, rpc_factory=chain.rpc)


@pytest.fixture
def payment_client(client, catalog, aggregator, chain):
    """Client whose payment routes talk to the fakes"""
    def _processor(db: Session = Depends(get_db)):
        return PaymentProcessor(db, catalog, aggregator, rpc_factory=chain.rpc)

    app.dependency_overrides[get_processor] = _processor
    yield client
    app.dependency_overrides.pop(get_processor, None)


def add_merchant(db, merchant_id=MERCHANT_ID, preferred_token="USDC", network="devnet", wallet=None) -> Merchant:
    merchant = Merchant(
        id=merchant_id,
        business_name="Coffee Corner",
        wallet_address=wallet or str(Keypair().pubkey()),
        preferred_token=preferred_token,
        network=network,
    )
    db.add(merchant)
    db.commit()
    db.refresh(merchant)
    return merchant


def add_link(db, merchant, amount="10.00", status="active", name="Espresso") -> PaymentLink:
    link = PaymentLink(
        merchant_id=merchant.id,
        name=name,
        description="Double shot",
        amount=Decimal(amount),
        status=status,
    )
    db.add(link)
    db.commit()
    db.refresh(link)
    return link
