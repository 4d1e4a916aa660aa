from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from services.editing_session import EditingSession, get_editing_session
from services.errors import EditingError, TransportFailure

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("/save")
async def save(session: EditingSession = Depends(get_editing_session)):
    try:
        sent = await session.save()
    except EditingError as e:
        return JSONResponse({"message": str(e), "category": "error"}, status_code=400)
    except TransportFailure as e:
        return JSONResponse({"message": f"Failed to send payload: {e}", "category": "error"}, status_code=502)
    return JSONResponse({"sent": sent, "message": f"Sent {sent} item(s) to the device.", "category": "success"})


@router.post("/reset")
async def reset(session: EditingSession = Depends(get_editing_session)):
    await session.reset()
    return JSONResponse({"message": "Configuration cleared.", "category": "success"})
