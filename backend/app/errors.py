"""
Erreurs métier exposées aux clients de l'API.

Chaque erreur porte un ErrorKind qui détermine le code HTTP renvoyé par
le handler global (app.main). Le corps de réponse est toujours {"error": ...}.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "ValidationFailed"
    INVALID_CREDENTIALS = "InvalidCredentials"
    UNAUTHENTICATED = "Unauthenticated"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    MALFORMED_TOKEN = "MalformedToken"
    INTERNAL = "Internal"


HTTP_STATUS = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,  # contrat historique du front : 400 et non 409
    ErrorKind.MALFORMED_TOKEN: 401,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """
    Base des erreurs métier.
    `details` contient les messages par champ, `extra` des clés ajoutées telles
    quelles au corps de réponse (ex: {"invalidIds": [...]}).
    """
    kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        details: Optional[List[str]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra or {}

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        body.update(self.extra)
        return body

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


class ValidationFailedError(AppError):
    kind = ErrorKind.VALIDATION_FAILED


class InvalidCredentialsError(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS


class UnauthenticatedError(AppError):
    kind = ErrorKind.UNAUTHENTICATED


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class MalformedTokenError(AppError):
    kind = ErrorKind.MALFORMED_TOKEN
