"""
Router pour la gestion des départements.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.academic import DepartmentCreate, DepartmentResponse, DepartmentUpdate
from app.schemas.base import MessageResponse
from app.services import department_service

router = APIRouter(prefix="/api/departments", tags=["Départements"])

NOT_FOUND = "Département introuvable."


@router.get("", response_model=List[DepartmentResponse], summary="Lister les départements")
def list_departments(db: Session = Depends(get_db)):
    return department_service.get_departments(db)


@router.post("", response_model=DepartmentResponse, status_code=201, summary="Créer un département")
def create_department(data: DepartmentCreate, db: Session = Depends(get_db)):
    """Crée un département avec un code unique (majuscules et chiffres)."""
    return department_service.create_department(db, data)


@router.get("/{department_id}", response_model=DepartmentResponse, summary="Détail d'un département")
def get_department(department_id: uuid.UUID, db: Session = Depends(get_db)):
    department = department_service.get_department(db, department_id)
    if department is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return department


@router.put("/{department_id}", response_model=DepartmentResponse, summary="Modifier un département")
def update_department(department_id: uuid.UUID, data: DepartmentUpdate, db: Session = Depends(get_db)):
    department = department_service.update_department(db, department_id, data)
    if department is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return department


@router.delete("/{department_id}", response_model=MessageResponse, summary="Supprimer un département")
def delete_department(department_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que des filières, enseignants ou étudiants y sont rattachés."""
    if not department_service.delete_department(db, department_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Département supprimé."}
