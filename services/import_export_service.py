import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from constants import AppConstants
from services.entries import Entry, is_duplicate
from services.errors import OtpImportError
from services.import_export import parse_otp_uri
from services.migration import decode_account_record, is_migration_uri, iter_account_records

logger = logging.getLogger(__name__)


def _plural(count: int, one: str, many: str) -> str:
    return one if count == 1 else f"{count} {many}"


@dataclass
class ImportResult:
    added: int = 0
    skipped: int = 0
    errors: int = 0
    limit_reached: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.skipped or self.errors)

    def message(self) -> str:
        if self.is_empty and not self.limit_reached:
            return "No valid URLs found!"
        parts = []
        if self.added:
            parts.append(_plural(self.added, "Entry successfully added", "entries successfully added"))
        if self.skipped:
            parts.append(_plural(self.skipped, "1 duplicate skipped", "duplicates skipped"))
        if self.errors:
            parts.append("Parse error: 1 URL failed" if self.errors == 1
                         else f"Parse errors: {self.errors} URLs failed")
        if self.limit_reached:
            parts.append(f"Limit reached: {AppConstants.MAX_ENTRIES} accounts maximum")
        return "\n".join(parts)

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "skipped": self.skipped,
            "errors": self.errors,
            "limit_reached": self.limit_reached,
        }


class ImportExportService:
    @staticmethod
    def import_lines(text: str, existing: Sequence[Entry]) -> Tuple[List[Entry], ImportResult]:
        """
        Import every pasted line (otpauth:// or migration URI) into a copy of ``existing``
        Returns: (augmented_entries, result)
        """
        entries = list(existing)
        result = ImportResult()

        def admit(entry: Entry):
            if is_duplicate(entry, entries):
                result.skipped += 1
            else:
                entries.append(entry)
                result.added += 1

        def at_capacity() -> bool:
            if len(entries) >= AppConstants.MAX_ENTRIES:
                result.limit_reached = True
            return result.limit_reached

        for line in text.split("\n"):
            line = line.strip()
            if not line:
                continue

            if is_migration_uri(line):
                try:
                    for record in iter_account_records(line):
                        if at_capacity():
                            break
                        try:
                            entry = decode_account_record(record)
                        except OtpImportError as e:
                            logger.info("Migration record rejected: %s", e)
                            result.errors += 1
                            continue
                        if entry is not None:
                            admit(entry)
                except OtpImportError as e:
                    logger.info("Migration line rejected: %s", e)
                    result.errors += 1
                if result.limit_reached:
                    break
                continue

            if at_capacity():
                break
            try:
                admit(parse_otp_uri(line))
            except OtpImportError as e:
                logger.info("otpauth line rejected: %s", e)
                result.errors += 1

        logger.info("Import finished: added=%d skipped=%d errors=%d limit_reached=%s",
                    result.added, result.skipped, result.errors, result.limit_reached)
        return entries, result
