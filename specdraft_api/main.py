from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status

from specdraft_api import __version__
from specdraft_api.agent.router import router as agent_router
from specdraft_api.aws import AWSClient
from specdraft_api.config import Settings, get_settings
from specdraft_api.logging import configure_logging
from specdraft_api.schemas import BedrockModelsResponse, HealthResponse

_startup_settings = get_settings()
configure_logging(
    log_file=_startup_settings.log_file,
    enable_structured_logging=_startup_settings.structured_logging,
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Specdraft Orchestrator",
    version=__version__,
    description="Agent-driven technical specification drafting service",
    docs_url="/docs" if os.getenv("SPECDRAFT_ENABLE_DOCS", "true").lower() == "true" else None,
    redoc_url="/redoc" if os.getenv("SPECDRAFT_ENABLE_DOCS", "true").lower() == "true" else None,
)

if os.getenv("SPECDRAFT_ENABLE_CORS", "false").lower() == "true":
    from fastapi.middleware.cors import CORSMiddleware

    allowed_origins = os.getenv("SPECDRAFT_ALLOWED_ORIGINS", "").split(",")
    allowed_origins = [origin.strip() for origin in allowed_origins if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(agent_router)


SettingsDep = Annotated[Settings, Depends(get_settings)]


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, timestamp=datetime.now(UTC))


@app.get("/aws/bedrock/models", response_model=BedrockModelsResponse)
def aws_bedrock_models(settings: SettingsDep) -> BedrockModelsResponse:
    if not settings.aws.use_bedrock:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bedrock is disabled")
    client = AWSClient(settings.aws)
    models = client.list_bedrock_models()
    logger.debug(f"Listed {len(models)} Bedrock models")
    return BedrockModelsResponse(models=models)


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "specdraft_api.main:app",
        host=os.getenv("SPECDRAFT_HOST", "127.0.0.1"),
        port=int(os.getenv("SPECDRAFT_PORT", "8890")),
    )
