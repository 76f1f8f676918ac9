"""
Point d'entrée principal de l'API E-Learning.
Démarrage : uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Enregistre tous les modèles dans Base.metadata avant les routers
import app.models  # noqa: F401
from app.access_guard import AccessGuardMiddleware
from app.config import settings
from app.errors import AppError, ErrorKind, HTTP_STATUS
from app.routers import (
    auth,
    courses,
    departments,
    files,
    portals,
    student_portal,
    students,
    subjects,
    teacher_portal,
    teachers,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="E-Learning API",
    description="API des portails administrateur, enseignant et étudiant",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Le garde est ajouté avant CORS : CORSMiddleware reste la couche la plus externe.
app.add_middleware(AccessGuardMiddleware)

# CORS : la session est un cookie, les credentials doivent donc être autorisés.
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(auth.router)
app.include_router(departments.router)
app.include_router(courses.router)
app.include_router(subjects.router)
app.include_router(teachers.router)
app.include_router(students.router)
app.include_router(files.router)
app.include_router(teacher_portal.router)
app.include_router(student_portal.router)
app.include_router(portals.router)


def _format_validation_error(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "")
    # Les ValueError levées par nos validateurs sont préfixées par pydantic
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{field}: {message}" if field else message


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Erreurs de validation pydantic : 400 avec un message par champ, rien n'est persisté."""
    details = [_format_validation_error(error) for error in exc.errors()]
    return JSONResponse(
        status_code=HTTP_STATUS[ErrorKind.VALIDATION_FAILED],
        content={"error": details[0] if details else "Données invalides.", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=HTTP_STATUS[ErrorKind.INTERNAL],
        content={"error": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "E-Learning API", "version": "0.1.0"}
