# main.py
import os
import logging
from dotenv import load_dotenv
from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from investme_api.infrastructure.logging_config import configure_logging
from investme_api.domain.exceptions import DomainError
from investme_api.domain.services.status_catalog import catalog_as_dict
from investme_api.application.controllers.auth_controller import router as auth_router
from investme_api.application.controllers.profile_controller import router as profile_router
from investme_api.application.controllers.company_controller import router as company_router
from investme_api.application.controllers.credit_request_controller import router as credit_request_router
from investme_api.application.controllers.backoffice_controller import router as backoffice_router
from investme_api.application.controllers.notification_controller import router as notification_router
from investme_api.application.controllers.message_controller import router as message_router
from investme_api.application.controllers.valuation_controller import router as valuation_router

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="Investme API", version="0.1.0")

origins = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://localhost:5000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Falha inesperada em %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Erro interno do servidor."})


meta_router = APIRouter(prefix="/meta", tags=["meta"])


@meta_router.get("/statuses")
def statuses():
    return catalog_as_dict()


api = APIRouter(prefix="/api")
api.include_router(auth_router)
api.include_router(profile_router)
api.include_router(company_router)
api.include_router(credit_request_router)
api.include_router(backoffice_router)
api.include_router(notification_router)
api.include_router(message_router)
api.include_router(valuation_router)
api.include_router(meta_router)
app.include_router(api)


@app.get("/health")
def health():
    return {"status": "ok"}
