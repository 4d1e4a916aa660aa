import logging
from fastapi import Request
from typing import List, Tuple

from constants import AppConstants
from services.entries import Entry, is_duplicate, make_entry
from services.errors import EditingError
from services.import_export_service import ImportExportService, ImportResult
from services.payload import encode
from services.storage import KeyValueStore, dump_snapshot, load_snapshot
from services.transfer import SyncService
from services.transport import Transport
from services.validator import validate_labels, validate_manual_entry
from utils import normalize_secret, sanitize_field

logger = logging.getLogger(__name__)


class EditingSession:
    """The entry list being edited, plus its storage and device link.

    The list is loaded once at session start and written back only by
    :meth:`save` and :meth:`reset`; edits in between stay in memory.
    """

    def __init__(self, store: KeyValueStore, transport: Transport,
                 settle_delay: float = AppConstants.SETTLE_DELAY,
                 pacing_delay: float = AppConstants.PACING_DELAY):
        self.store = store
        self.transport = transport
        self.settle_delay = settle_delay
        self.pacing_delay = pacing_delay
        self._entries: List[Entry] = []

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    async def load(self):
        self._entries = load_snapshot(await self.store.get(AppConstants.STORAGE_KEY_ENTRIES))
        logger.info("Session loaded with %d entries", len(self._entries))

    def import_text(self, text: str) -> ImportResult:
        self._entries, result = ImportExportService.import_lines(text, self._entries)
        return result

    def add_manual(self, label: str, account_name: str, secret: str) -> Entry:
        if len(self._entries) >= AppConstants.MAX_ENTRIES:
            raise EditingError(f"Maximum limit of {AppConstants.MAX_ENTRIES} accounts reached!")

        label = sanitize_field(label)
        account_name = sanitize_field(account_name)
        secret = normalize_secret(secret)
        error_msg = validate_manual_entry(label, account_name, secret)
        if error_msg:
            raise EditingError(error_msg)

        entry = make_entry(label, account_name, secret)
        if is_duplicate(entry, self._entries):
            raise EditingError("This secret already exists in your list!")
        self._entries.append(entry)
        return entry

    def _check_index(self, index: int):
        if not 0 <= index < len(self._entries):
            raise EditingError("Entry not found.")

    def update(self, index: int, label: str, account_name: str) -> Entry:
        self._check_index(index)
        label = sanitize_field(label)
        account_name = sanitize_field(account_name)
        error_msg = validate_labels(label, account_name)
        if error_msg:
            raise EditingError(error_msg)

        old = self._entries[index]
        entry = make_entry(label, account_name, old.secret, old.period, old.digits, old.algorithm)
        self._entries[index] = entry
        return entry

    def remove(self, index: int) -> Entry:
        self._check_index(index)
        return self._entries.pop(index)

    def move(self, from_index: int, to_index: int):
        self._check_index(from_index)
        self._check_index(to_index)
        entry = self._entries.pop(from_index)
        self._entries.insert(to_index, entry)

    async def save(self) -> int:
        """
        Persist the list and its payload, then send the payload to the device
        Returns: number of records sent
        """
        if not self._entries:
            raise EditingError("Add at least one entry first.")
        payload = encode(self._entries)
        await self.store.set(AppConstants.STORAGE_KEY_ENTRIES, dump_snapshot(self._entries))
        await self.store.set(AppConstants.STORAGE_KEY_PAYLOAD, payload)
        return await SyncService.transfer(payload, self.transport, self.settle_delay, self.pacing_delay)

    async def resend(self) -> int:
        payload = await self.store.get(AppConstants.STORAGE_KEY_PAYLOAD)
        if not payload:
            logger.info("Device asked for a resend but no payload is stored")
            return 0
        return await SyncService.transfer(payload, self.transport, self.settle_delay, self.pacing_delay)

    async def reset(self):
        await self.store.delete(AppConstants.STORAGE_KEY_ENTRIES, AppConstants.STORAGE_KEY_PAYLOAD)
        self._entries = []
        logger.info("Stored entries and payload cleared")


def get_editing_session(request: Request) -> EditingSession:
    return request.app.state.editing_session
