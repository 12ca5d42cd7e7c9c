from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.pool import StaticPool
from typing import Optional
from config.settings import settings
from db.base import Base
import logging
import socket

logger = logging.getLogger(__name__)

POOL_KWARGS = {"pool_pre_ping": True, "pool_recycle": 300}

def _resolve_ipv4(host: str, port: int) -> Optional[str]:
    """Supabase hosts also publish AAAA records that containers often cannot reach"""
    try:
        infos = socket.getaddrinfo(host, port, family=socket.AF_INET, type=socket.SOCK_STREAM)
    except OSError as e:
        logger.warning(f"IPv4 DNS resolution failed for {host}: {e}")
        return None
    return infos[0][4][0] if infos else None

def _sqlite_engine(url: URL):
    connect_args = {"check_same_thread": False}
    if url.database in (None, "", ":memory:"):
        # One shared connection, otherwise every session gets its own empty database
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, connect_args=connect_args, **POOL_KWARGS)

def _postgres_engine(url: URL):
    port = url.port or 5432
    ipv4 = _resolve_ipv4(url.host, port) if url.host else None
    if not ipv4:
        return create_engine(url, **POOL_KWARGS)

    import psycopg2  # type: ignore

    def _creator():
        return psycopg2.connect(
            host=ipv4,
            port=port,
            user=url.username,
            password=url.password,
            dbname=url.database,
            sslmode=url.query.get("sslmode", "require"),
            connect_timeout=10,
            application_name="solpay-backend",
        )
    return create_engine(url, creator=_creator, **POOL_KWARGS)

def make_engine(database_url: str):
    url = make_url(database_url)
    if url.drivername.startswith("sqlite"):
        return _sqlite_engine(url)
    if url.drivername.startswith("postgresql"):
        return _postgres_engine(url)
    return create_engine(url, **POOL_KWARGS)

engine = make_engine(settings.DATABASE_URL_SYNC)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database error: {e}")
        db.rollback()
        raise
    finally:
        db.close()

def create_tables():
    """Create all tables"""
    # Register models on the metadata before create_all
    import models.merchant  # noqa: F401
    import models.payment_link  # noqa: F401
    import models.transaction  # noqa: F401
    import models.api_key  # noqa: F401
    import models.analytics  # noqa: F401
    Base.metadata.create_all(bind=engine)
