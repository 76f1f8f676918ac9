"""
Router pour la gestion des enseignants (compte + profil + classes).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.base import MessageResponse
from app.schemas.teacher import TeacherCreate, TeacherResponse, TeacherUpdate
from app.services import teacher_service

router = APIRouter(prefix="/api/teachers", tags=["Enseignants"])

NOT_FOUND = "Enseignant introuvable."


@router.get("", response_model=List[TeacherResponse], summary="Lister les enseignants")
def list_teachers(db: Session = Depends(get_db)):
    return teacher_service.get_teachers(db)


@router.post("", response_model=TeacherResponse, status_code=201, summary="Créer un enseignant")
def create_teacher(data: TeacherCreate, db: Session = Depends(get_db)):
    """
    Crée le compte, le profil et une classe par matière enseignée
    (code de classe "<matricule>-<code matière>").
    """
    return teacher_service.create_teacher(db, data)


@router.get("/{teacher_id}", response_model=TeacherResponse, summary="Détail d'un enseignant")
def get_teacher(teacher_id: uuid.UUID, db: Session = Depends(get_db)):
    teacher = teacher_service.get_teacher(db, teacher_id)
    if teacher is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return teacher


@router.put("/{teacher_id}", response_model=TeacherResponse, summary="Modifier un enseignant")
def update_teacher(teacher_id: uuid.UUID, data: TeacherUpdate, db: Session = Depends(get_db)):
    teacher = teacher_service.update_teacher(db, teacher_id, data)
    if teacher is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return teacher


@router.delete("/{teacher_id}", response_model=MessageResponse, summary="Supprimer un enseignant")
def delete_teacher(teacher_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que l'enseignant a des classes affectées."""
    if not teacher_service.delete_teacher(db, teacher_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Enseignant supprimé."}
