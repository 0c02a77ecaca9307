from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from astrogate.api.deps import get_admin_session_token_service, get_session_token_service
from astrogate.api.routers import admin, ai, auth, billing, subscription
from astrogate.shared.config import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Signing keys are validated here so a misconfigured production deploy fails to boot.
    session_codec = get_session_token_service()
    admin_codec = get_admin_session_token_service()
    logger.info(
        "Astrogate started; env=%s billing_enabled=%s session_fallback_key=%s admin_fallback_key=%s",
        settings.app_env,
        settings.billing_enabled,
        session_codec.uses_fallback_key,
        admin_codec.uses_fallback_key,
    )
    yield


app = FastAPI(title="Astrogate API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=bool(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(subscription.router)
app.include_router(ai.router)
app.include_router(billing.router)
app.include_router(admin.router)


@app.get("/api/health")
def health():
    return {"status": "ok"}
