import os
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from the backend .env explicitly (works regardless of cwd)
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

class Settings(BaseSettings):
    """Application settings"""

    # Base directory
    BASE_DIR: Path = Path(__file__).parent.parent

    # Database - Supabase PostgreSQL (fallback to local SQLite if not provided)
    DATABASE_URL: str = os.getenv("DATABASE_URL") or "sqlite:///./solpay.db"
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")

    # Access tokens are issued by Supabase Auth; we only verify them
    SUPABASE_JWT_SECRET: str = os.getenv("SUPABASE_JWT_SECRET", "")
    SUPABASE_JWT_AUDIENCE: str = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")
    JWT_ALGORITHM: str = "HS256"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Get sync database URL with psycopg2 driver"""
        if self.DATABASE_URL.startswith("postgresql+asyncpg://"):
            return self.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://", 1)
        if self.DATABASE_URL.startswith("postgres://"):
            return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return self.DATABASE_URL

    # Solana RPC endpoints (one per network)
    SOLANA_MAINNET_RPC_URL: str = os.getenv("SOLANA_MAINNET_RPC_URL", "https://api.mainnet-beta.solana.com")
    SOLANA_DEVNET_RPC_URL: str = os.getenv("SOLANA_DEVNET_RPC_URL", "https://api.devnet.solana.com")
    CONFIRM_TIMEOUT_SECONDS: float = float(os.getenv("CONFIRM_TIMEOUT_SECONDS", "30"))
    CONFIRM_POLL_INTERVAL: float = float(os.getenv("CONFIRM_POLL_INTERVAL", "0.5"))
    EXPLORER_BASE_URL: str = os.getenv("EXPLORER_BASE_URL", "https://explorer.solana.com")

    # Jupiter swap aggregator
    JUPITER_API_URL: str = os.getenv("JUPITER_API_URL", "https://quote-api.jup.ag/v6")
    DEFAULT_SLIPPAGE_PERCENT: float = float(os.getenv("DEFAULT_SLIPPAGE_PERCENT", "1"))

    # Token catalog
    TOKEN_LIST_URL: str = os.getenv(
        "TOKEN_LIST_URL",
        "https://cdn.jsdelivr.net/gh/solana-labs/token-list@main/src/tokens/solana.tokenlist.json",
    )
    ACCEPTED_TOKENS: List[str] = ["SOL", "USDC", "RAY", "SRM", "FIDA"]

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

    # Frontend Base URL (for shareable payment links)
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # CORS - Updated for development and production
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    # Preview and production deployments on Vercel
    CORS_ORIGIN_REGEX: str = os.getenv("CORS_ORIGIN_REGEX", r"https://([a-z0-9-]+\.)*vercel\.app")

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Analytics window when no range is given
    ANALYTICS_DEFAULT_DAYS: int = 30

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
        "from_attributes": True,
    }

    def rpc_url_for(self, network: str) -> str:
        return self.SOLANA_MAINNET_RPC_URL if network == "mainnet" else self.SOLANA_DEVNET_RPC_URL

# Create global settings instance
settings = Settings()
