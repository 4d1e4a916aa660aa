import uvicorn
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse

from config import settings, engine, async_session, master_fernet, http_client, Base, configure_logging
from routes.entries import router as entries_router
from routes.sync import router as sync_router
from routes.device import router as device_router
from services.editing_session import EditingSession
from services.storage import SqlKeyValueStore
from services.transport import HttpTransport
import models  # noqa: F401  registers tables on Base.metadata

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = EditingSession(
        store=SqlKeyValueStore(async_session, master_fernet),
        transport=HttpTransport(settings.DEVICE_URL, http_client, settings.DEVICE_TIMEOUT),
    )
    await session.load()
    app.state.editing_session = session
    yield
    await http_client.aclose()
    await engine.dispose()


app = (FastAPI(
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
    )
)

app.include_router(entries_router)
app.include_router(sync_router)
app.include_router(device_router)

@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse({"message": exc.detail, "category": "error"}, status_code=exc.status_code)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"message": "Invalid request", "errors": jsonable_encoder(exc.errors()), "category": "error"},
                        status_code=422)

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logging.exception(f"Unhandled error for request: {request.url}")
    return JSONResponse({"message": "Internal server error", "category": "error"}, status_code=500)

@app.get("/health", status_code=status.HTTP_200_OK)
@app.head("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return JSONResponse(content={"status": "ok"})

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=int(settings.PORT or 8000), reload=True)
