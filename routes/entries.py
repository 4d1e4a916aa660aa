import io
from fastapi import APIRouter, Form, Depends, HTTPException
from fastapi.responses import JSONResponse
from starlette.responses import StreamingResponse

from constants import AppConstants
from services.editing_session import EditingSession, get_editing_session
from services.errors import EditingError
from services.import_export import build_qr_png

router = APIRouter(prefix="/entries", tags=["entries"])


def _error(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"message": message, "category": "error"}, status_code=status_code)


@router.get("")
async def get_list(session: EditingSession = Depends(get_editing_session)):
    return JSONResponse(content={
        "entries": [e.to_dict() for e in session.entries],
        "count": len(session.entries),
        "max": AppConstants.MAX_ENTRIES,
    })


@router.post("/import")
async def import_entries(text: str = Form(...), session: EditingSession = Depends(get_editing_session)):
    result = session.import_text(text)
    content = result.to_dict()
    content["message"] = result.message()
    content["category"] = "success" if result.added else "error"
    return JSONResponse(content=content)


@router.post("/create")
async def create_entry(label: str = Form(...), secret: str = Form(...), account_name: str = Form(""),
                       session: EditingSession = Depends(get_editing_session)):
    try:
        entry = session.add_manual(label, account_name, secret)
    except EditingError as e:
        return _error(str(e))
    return JSONResponse({"entry": entry.to_dict(), "message": "Entry successfully added", "category": "success"})


@router.post("/update")
async def update_entry(index: int = Form(...), label: str = Form(...), account_name: str = Form(""),
                       session: EditingSession = Depends(get_editing_session)):
    try:
        entry = session.update(index, label, account_name)
    except EditingError as e:
        return _error(str(e))
    return JSONResponse({"entry": entry.to_dict(), "message": "Entry updated!", "category": "success"})


@router.post("/delete")
async def delete_entry(index: int = Form(...), session: EditingSession = Depends(get_editing_session)):
    try:
        session.remove(index)
    except EditingError as e:
        return _error(str(e), 404)
    return JSONResponse({"message": "Entry deleted.", "category": "success"})


@router.post("/move")
async def move_entry(from_index: int = Form(...), to_index: int = Form(...),
                     session: EditingSession = Depends(get_editing_session)):
    try:
        session.move(from_index, to_index)
    except EditingError as e:
        return _error(str(e))
    return JSONResponse({"message": "Entry moved.", "category": "success"})


@router.get("/{index}/qr")
async def export_qr(index: int, session: EditingSession = Depends(get_editing_session)):
    entries = session.entries
    if not 0 <= index < len(entries):
        raise HTTPException(status_code=404, detail="Entry not found.")
    png_bytes = build_qr_png(entries[index])
    return StreamingResponse(io.BytesIO(png_bytes), media_type="image/png",
                             headers={"Content-Disposition": 'inline; filename="totp_entry.png"'})
