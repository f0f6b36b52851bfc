from dotenv import load_dotenv
import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exception_handlers import register_exception_handlers
from app.core.log import configure_logging

# ───────────────── ROUTER IMPORTS ─────────────────
from app.routes.auth import router as auth_router
from app.routes.student_auth import router as student_auth_router
from app.routes.students import router as students_router
from app.routes.admin import router as admin_router

configure_logging()
settings.validate_runtime()

app = FastAPI(
    title="Reading Practice Platform API",
    description="Authentication and session core for the Reading Practice Platform",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# ───────── ERROR HANDLERS (no internal detail ever reaches the client) ─────────
register_exception_handlers(app)

# ───────────────── CORS ─────────────────
# Cookies are the credential, so origins must be explicit.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ───────────────── ROUTES ─────────────────
app.include_router(auth_router, prefix="/api")
app.include_router(student_auth_router, prefix="/api")
app.include_router(students_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


# ───────────────── HEALTH ─────────────────

@app.get("/", tags=["Health"])
async def root():
    return {
        "status": "ok",
        "app": "Reading Practice Platform API",
        "env": settings.APP_ENV,
    }


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy"}
