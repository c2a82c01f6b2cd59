from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


# Also look next to a packaged executable and in backend/ for a .env
def _load_dotenv_robust() -> None:
    candidates = [
        Path(sys.executable).resolve().parent / ".env",
        Path(os.getcwd()) / ".env",
        # main.py lives at backend/nova_search/main.py -> parents[1] = backend/
        Path(__file__).resolve().parents[1] / ".env",
    ]
    for p in candidates:
        if p.exists():
            load_dotenv(p, override=False)
            return

_load_dotenv_robust()


from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import NovaError
from .local_layer.file_extract import extract_attachment
from .logging_conf import setup_logging
from .orchestrator.catalog import ModelCatalog, is_image_model
from .orchestrator.orchestrator import Orchestrator
from .orchestrator.routing import AUTO_SENTINELS
from .schemas.dtos import (
    Attachment,
    CatalogEntry,
    GatewayModelEntry,
    ModelsResponse,
    SearchRequest,
    SearchResponse,
)

# ----------------------------
# Logging
# ----------------------------
setup_logging()
logger = logging.getLogger(__name__)

if not settings.gateway_api_key:
    logger.warning("GATEWAY_API_KEY is not configured; /search will answer 500 until it is set")

# ----------------------------
# App
# ----------------------------
app = FastAPI(title="NOVA Search Backend", version="1.0.0")
orchestrator = Orchestrator(settings)


def get_orchestrator() -> Orchestrator:
    return orchestrator


# Registered before CORSMiddleware so the CORS layer wraps unexpected 500s too.
@app.middleware("http")
async def unknown_error(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Search error")
        return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],  # includes OPTIONS (preflight)
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# ----------------------------
# Errors
# ----------------------------
@app.exception_handler(RequestValidationError)
async def validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request: %d validation errors", len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request parameters"})


@app.exception_handler(NovaError)
async def nova_error(_: Request, exc: NovaError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

# ----------------------------
# Routes
# ----------------------------
@app.get("/")
def root():
    return {
        "message": "NOVA search backend is running.",
        "try": ["/health", "/docs", "/models", "/search"],
    }


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/routes")
def routes():
    return [
        {
            "path": r.path,
            "methods": sorted(list(getattr(r, "methods", None) or [])),
        }
        for r in app.router.routes
    ]


@app.get("/models", response_model=ModelsResponse)
def models(orch: Orchestrator = Depends(get_orchestrator)) -> ModelsResponse:
    catalog: ModelCatalog = orch.catalog
    return ModelsResponse(
        autoModes=sorted(AUTO_SENTINELS),
        defaults={
            "text": catalog.default_text_model,
            "vision": catalog.default_vision_model,
            "image": catalog.default_image_model,
        },
        gateway=[
            GatewayModelEntry(
                id=m,
                multimodal=m in catalog.multimodal_models,
                imageGeneration=is_image_model(m),
            )
            for m in catalog.ordered_gateway
        ],
        direct=[
            CatalogEntry(
                id=m.id,
                name=m.name,
                description=m.description,
                isFree=m.is_free,
                contextLength=m.context_length,
            )
            for m in catalog.direct_models.values()
        ],
    )


@app.post("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search(req: SearchRequest, orch: Orchestrator = Depends(get_orchestrator)) -> SearchResponse:
    return await orch.process(req)


@app.post("/extract", response_model=Attachment, response_model_exclude_none=True)
async def extract(file: UploadFile = File(...)) -> Attachment:
    data = await file.read()
    return extract_attachment(file.filename or "upload", file.content_type or "", data)
