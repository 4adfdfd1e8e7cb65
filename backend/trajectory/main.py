from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.db import init_db
from .core.logging import configure_logging
from .api.routes_profiles import router as profiles_router
from .api.routes_stories import router as stories_router
from .api.routes_case_studies import router as case_studies_router
from .schemas.trajectory import HealthOut

configure_logging()
settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(title="Trajectory API", lifespan=lifespan)

# CORS:
# - In prod, FRONTEND_ORIGIN is required and we never fall back to "*".
# - In non-prod, wide-open CORS is only enabled if CORS_ALLOW_ALL_ORIGINS=True
#   or no origin is configured.
if settings.ENV.lower() == "prod":
    if not settings.FRONTEND_ORIGIN:
        raise RuntimeError(
            "FRONTEND_ORIGIN must be set in production, refusing to start with wide-open CORS."
        )
    origins = [
        o.strip()
        for o in settings.FRONTEND_ORIGIN.split(",")
        if o.strip()
    ]
else:
    if settings.CORS_ALLOW_ALL_ORIGINS:
        origins = ["*"]
    elif settings.FRONTEND_ORIGIN:
        origins = [
            o.strip()
            for o in settings.FRONTEND_ORIGIN.split(",")
            if o.strip()
        ]
    else:
        origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(profiles_router, prefix=settings.API_PREFIX)
app.include_router(stories_router, prefix=settings.API_PREFIX)
app.include_router(case_studies_router, prefix=settings.API_PREFIX)


@app.get(f"{settings.API_PREFIX}/health", response_model=HealthOut)
def health():
    """Report which external API keys are configured, never their values."""
    current = get_settings()
    return HealthOut(
        has_search_key=bool(current.WEB_SEARCH_API_KEY),
        has_llm_key=bool(current.GEMINI_API_KEY),
    )
