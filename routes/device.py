import logging
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from constants import AppConstants
from services.editing_session import EditingSession, get_editing_session
from services.errors import TransportFailure

router = APIRouter(prefix="/device", tags=["device"])
logger = logging.getLogger(__name__)


@router.post("/messages")
async def device_message(message: dict = Body(...), session: EditingSession = Depends(get_editing_session)):
    if AppConstants.MESSAGE_KEY_REQUEST in message:
        try:
            sent = await session.resend()
        except TransportFailure as e:
            return JSONResponse({"message": f"Failed to send payload: {e}", "category": "error"}, status_code=502)
        return JSONResponse({"sent": sent})

    if AppConstants.MESSAGE_KEY_STATUS in message:
        status_code = message[AppConstants.MESSAGE_KEY_STATUS]
        if status_code == AppConstants.DEVICE_STATUS_OK:
            logger.info("Device confirmed all entries stored")
        else:
            logger.warning("Device reported status %s", status_code)
        return JSONResponse({"status": "ok"})

    return JSONResponse({"message": "Unknown device message", "category": "error"}, status_code=400)
