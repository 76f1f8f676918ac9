"""
Router pour la gestion des matières.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.academic import SubjectCreate, SubjectResponse, SubjectUpdate
from app.schemas.base import MessageResponse
from app.services import subject_service

router = APIRouter(prefix="/api/subjects", tags=["Matières"])

NOT_FOUND = "Matière introuvable."


@router.get("", response_model=List[SubjectResponse], summary="Lister les matières")
def list_subjects(
    course_id: Optional[uuid.UUID] = Query(default=None, alias="courseId"),
    department_id: Optional[uuid.UUID] = Query(default=None, alias="departmentId"),
    db: Session = Depends(get_db),
):
    """Filtre par filière, sinon par département (via la filière)."""
    return subject_service.get_subjects(db, course_id, department_id)


@router.post("", response_model=SubjectResponse, status_code=201, summary="Créer une matière")
def create_subject(data: SubjectCreate, db: Session = Depends(get_db)):
    """Le code est unique au sein de la filière."""
    return subject_service.create_subject(db, data)


@router.get("/{subject_id}", response_model=SubjectResponse, summary="Détail d'une matière")
def get_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)):
    subject = subject_service.get_subject(db, subject_id)
    if subject is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return subject


@router.put("/{subject_id}", response_model=SubjectResponse, summary="Modifier une matière")
def update_subject(subject_id: uuid.UUID, data: SubjectUpdate, db: Session = Depends(get_db)):
    subject = subject_service.update_subject(db, subject_id, data)
    if subject is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return subject


@router.delete("/{subject_id}", response_model=MessageResponse, summary="Supprimer une matière")
def delete_subject(subject_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que des classes ou des inscriptions existent pour la matière."""
    if not subject_service.delete_subject(db, subject_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Matière supprimée."}
