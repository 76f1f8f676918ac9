"""
Base commune des schémas Pydantic.

Le front historique échange du camelCase (departmentId, uploadedBy...) :
les schémas exposent des alias camelCase tout en acceptant le snake_case en entrée.
"""

import re

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CODE_REGEX = re.compile(r"^[A-Z0-9]+$")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def require_min_length(value: str, minimum: int, label: str) -> str:
    """Retire les espaces et vérifie une longueur minimale."""
    value = value.strip()
    if len(value) < minimum:
        raise ValueError(f"{label} doit contenir au moins {minimum} caractères.")
    return value


def validate_code(value: str, minimum: int, maximum: int, label: str) -> str:
    """Code métier : majuscules et chiffres uniquement, longueur bornée."""
    value = value.strip()
    if len(value) < minimum:
        raise ValueError(f"{label} doit contenir au moins {minimum} caractères.")
    if len(value) > maximum:
        raise ValueError(f"{label} ne doit pas dépasser {maximum} caractères.")
    if not CODE_REGEX.match(value):
        raise ValueError(f"{label} ne doit contenir que des majuscules et des chiffres.")
    return value


def validate_range(value: int, minimum: int, maximum: int, label: str) -> int:
    if value < minimum or value > maximum:
        raise ValueError(f"{label} doit être compris entre {minimum} et {maximum}.")
    return value


class MessageResponse(CamelModel):
    message: str
