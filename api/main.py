import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from admin import repository as admin_repository
from admin import router as admin_router
from ai import router as ai_router
from auth import router as auth_router
from core import config, db
from core.storage import get_storage_backend
from favorites import router as favorites_router
from images import router as images_router
from inquiries import router as inquiries_router
from properties import router as properties_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One DB handle and one storage backend per process.
    app.state.db = await db.connect()
    app.state.storage = get_storage_backend()
    if app.state.db.available:
        await admin_repository.ensure_super_admin(app.state.db)
    try:
        yield
    finally:
        await app.state.db.close()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(db.DatabaseUnavailableError)
async def database_unavailable_handler(request: Request, exc: db.DatabaseUnavailableError) -> JSONResponse:
    logger.warning("write_rejected reason=database_unavailable path=%s", request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Database not available."})


# Locally stored images are served by the API itself.
if config.env_str("STORAGE_TYPE", "local").lower() != "s3":
    app.mount(
        "/uploads",
        StaticFiles(directory=config.env_str("UPLOAD_DIR", "uploads"), check_dir=False),
        name="uploads",
    )

app.include_router(auth_router.router, tags=["auth"])
app.include_router(properties_router.router, tags=["properties"])
app.include_router(images_router.router, tags=["images"])
app.include_router(favorites_router.router, tags=["favorites"])
app.include_router(inquiries_router.router, tags=["inquiries"])
app.include_router(ai_router.router, tags=["ai"])
app.include_router(admin_router.router, tags=["admin"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "database": bool(getattr(app.state, "db", None) and app.state.db.available)}


@app.get("/")
def root() -> dict:
    return {"message": "property marketplace api"}
