import json
import logging
from typing import List, Optional

from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import select, delete

from constants import AppConstants
from models import KeyValue
from services.entries import Entry, make_entry
from utils import normalize_secret

logger = logging.getLogger(__name__)


class KeyValueStore:
    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def delete(self, *keys: str) -> None:
        raise NotImplementedError


class SqlKeyValueStore(KeyValueStore):
    """Key-value rows in ``kv_store``, Fernet-encrypted at rest when a key is configured."""

    def __init__(self, session_factory, fernet: Optional[Fernet] = None):
        self.session_factory = session_factory
        self.fernet = fernet

    async def get(self, key: str) -> Optional[str]:
        async with self.session_factory() as session:
            result = await session.execute(select(KeyValue).where(KeyValue.key == key))
            row = result.scalars().first()
        if row is None:
            return None
        if self.fernet:
            try:
                return self.fernet.decrypt(row.value.encode()).decode()
            except InvalidToken:
                logger.warning("Stored value for %s cannot be decrypted with the configured key, ignoring it", key)
                return None
        return row.value

    async def set(self, key: str, value: str) -> None:
        if self.fernet:
            value = self.fernet.encrypt(value.encode()).decode()
        async with self.session_factory() as session:
            row = await session.get(KeyValue, key)
            if row is None:
                session.add(KeyValue(key=key, value=value))
            else:
                row.value = value
            await session.commit()

    async def delete(self, *keys: str) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(KeyValue).where(KeyValue.key.in_(keys)))
            await session.commit()


def dump_snapshot(entries: List[Entry]) -> str:
    return json.dumps([e.to_dict() for e in entries])


def load_snapshot(raw: Optional[str]) -> List[Entry]:
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except ValueError:
        logger.warning("Stored entry snapshot is not valid JSON, starting empty")
        return []
    if not isinstance(items, list):
        logger.warning("Stored entry snapshot is not a list, starting empty")
        return []

    entries = []
    for item in items[:AppConstants.MAX_ENTRIES]:
        if not isinstance(item, dict):
            continue
        secret = normalize_secret(str(item.get("secret") or ""))
        if not secret:
            continue
        entries.append(make_entry(
            str(item.get("label") or ""),
            str(item.get("account_name") or ""),
            secret,
            period=_as_int(item.get("period")),
            digits=_as_int(item.get("digits")),
            algorithm=item.get("algorithm", 0),
        ))
    return entries


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
