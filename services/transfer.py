import asyncio
import logging

from constants import AppConstants
from services.errors import TransportFailure
from services.payload import split_records
from services.transport import Transport

logger = logging.getLogger(__name__)


class SyncService:
    @staticmethod
    async def transfer(payload: str, transport: Transport,
                       settle_delay: float = AppConstants.SETTLE_DELAY,
                       pacing_delay: float = AppConstants.PACING_DELAY) -> int:
        """
        Send the record count, then every record, one message at a time.
        Record i+1 is sent only after record i was acknowledged; the first
        failure aborts the transfer and is raised as TransportFailure.
        Returns: number of records sent
        """
        records = split_records(payload)

        try:
            await transport.send_message({AppConstants.MESSAGE_KEY_COUNT: len(records)})
        except TransportFailure as e:
            logger.warning("Failed to send record count: %s", e)
            raise
        if not records:
            logger.info("Transfer finished: nothing to send")
            return 0

        delay = settle_delay
        for index, record in enumerate(records):
            await asyncio.sleep(delay)
            try:
                await transport.send_message({
                    AppConstants.MESSAGE_KEY_ENTRY_ID: index,
                    AppConstants.MESSAGE_KEY_ENTRY: record.strip(),
                })
            except TransportFailure as e:
                logger.warning("Failed to send entry %d: %s", index, e)
                raise
            delay = pacing_delay

        logger.info("Transfer finished: %d records sent", len(records))
        return len(records)
