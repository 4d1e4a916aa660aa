import os
import base64
import logging
from typing import Optional
from dotenv import load_dotenv
from cryptography.fernet import Fernet
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
import httpx

load_dotenv()

class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./totp_sync.db")
    ENCRYPTION_KEY: Optional[str] = os.getenv("ENCRYPTION_KEY")
    DEVICE_URL: str = os.getenv("DEVICE_URL", "http://127.0.0.1:9000/messages")
    DEVICE_TIMEOUT: float = float(os.getenv("DEVICE_TIMEOUT", "10"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")
    PORT: str = os.getenv("PORT", "8000")

settings = Settings()


def build_fernet(key: Optional[str]) -> Optional[Fernet]:
    if not key:
        return None
    try:
        return Fernet(key)
    except ValueError:
        raw = base64.b64decode(key)
        return Fernet(base64.urlsafe_b64encode(raw))


def configure_logging():
    logging.basicConfig(
        filename=settings.LOG_FILE,
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S"
    )


master_fernet = build_fernet(settings.ENCRYPTION_KEY)

engine = create_async_engine(settings.DATABASE_URL, future=True, echo=False, pool_pre_ping=True)
async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()

http_client = httpx.AsyncClient()
