"""
Router pour la gestion des filières.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.academic import CourseCreate, CourseResponse, CourseUpdate
from app.schemas.base import MessageResponse
from app.services import course_service

router = APIRouter(prefix="/api/courses", tags=["Filières"])

NOT_FOUND = "Filière introuvable."


@router.get("", response_model=List[CourseResponse], summary="Lister les filières")
def list_courses(
    department_id: Optional[uuid.UUID] = Query(default=None, alias="departmentId"),
    db: Session = Depends(get_db),
):
    """Retourne les filières avec leur département, filtrées par département si demandé."""
    return course_service.get_courses(db, department_id)


@router.post("", response_model=CourseResponse, status_code=201, summary="Créer une filière")
def create_course(data: CourseCreate, db: Session = Depends(get_db)):
    return course_service.create_course(db, data)


@router.get("/{course_id}", response_model=CourseResponse, summary="Détail d'une filière")
def get_course(course_id: uuid.UUID, db: Session = Depends(get_db)):
    course = course_service.get_course(db, course_id)
    if course is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return course


@router.put("/{course_id}", response_model=CourseResponse, summary="Modifier une filière")
def update_course(course_id: uuid.UUID, data: CourseUpdate, db: Session = Depends(get_db)):
    course = course_service.update_course(db, course_id, data)
    if course is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return course


@router.delete("/{course_id}", response_model=MessageResponse, summary="Supprimer une filière")
def delete_course(course_id: uuid.UUID, db: Session = Depends(get_db)):
    """Bloqué tant que des matières ou des étudiants y sont rattachés."""
    if not course_service.delete_course(db, course_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Filière supprimée."}
