import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from core import db, errors
from core.config import env_int, env_list, env_str
from places import router as places_router
from realtime import router as realtime_router
from users import router as users_router

logging.basicConfig(
    level=env_str("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=env_list("CORS_ORIGINS", ["*"]),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(errors.AppError)
async def handle_app_error(request: Request, exc: errors.AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed path=%s status=%s detail=%s", request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()})
    return JSONResponse(
        status_code=400,
        content={"detail": "Missing required data.", "fields": fields},
    )


app.include_router(auth_router.router, tags=["auth"])
app.include_router(users_router.router, tags=["users"])
app.include_router(places_router.router, tags=["places"])
app.include_router(realtime_router.router, tags=["realtime"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "marketplace api"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=env_int("PORT", 5000))
