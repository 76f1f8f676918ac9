"""
Router pour la gestion des étudiants (compte + profil + inscriptions initiales).
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.base import MessageResponse
from app.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from app.services import student_service

router = APIRouter(prefix="/api/students", tags=["Étudiants"])

NOT_FOUND = "Étudiant introuvable."


@router.get("", response_model=List[StudentResponse], summary="Lister les étudiants")
def list_students(db: Session = Depends(get_db)):
    """Retourne tous les étudiants triés par nom, avec département et filière."""
    return student_service.get_students(db)


@router.post("", response_model=StudentResponse, status_code=201, summary="Créer un étudiant")
def create_student(data: StudentCreate, db: Session = Depends(get_db)):
    """
    Crée le compte, le profil et les inscriptions.
    Chaque matière doit appartenir à la filière choisie.
    """
    return student_service.create_student(db, data)


@router.get("/{student_id}", response_model=StudentResponse, summary="Détail d'un étudiant")
def get_student(student_id: uuid.UUID, db: Session = Depends(get_db)):
    student = student_service.get_student(db, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return student


@router.put("/{student_id}", response_model=StudentResponse, summary="Modifier un étudiant")
def update_student(student_id: uuid.UUID, data: StudentUpdate, db: Session = Depends(get_db)):
    student = student_service.update_student(db, student_id, data)
    if student is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return student


@router.delete("/{student_id}", response_model=MessageResponse, summary="Supprimer un étudiant")
def delete_student(student_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que l'étudiant est inscrit à des matières."""
    if not student_service.delete_student(db, student_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Étudiant supprimé."}
