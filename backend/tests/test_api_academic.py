"""
Tests d'intégration API pour les départements, filières et matières.
Testent les URLs, les codes HTTP, la validation et le format {"error": ...}.
"""

import uuid
from datetime import datetime
from unittest.mock import patch

from app.errors import ConflictError, NotFoundError
from app.schemas.academic import CourseResponse, DepartmentResponse, SubjectResponse


# --- Helpers ---

def make_department_response(**kwargs) -> DepartmentResponse:
    return DepartmentResponse(
        id=kwargs.get("id", uuid.uuid4()),
        name=kwargs.get("name", "Informatique"),
        code=kwargs.get("code", "CS"),
        description=None,
        created_at=datetime.now(),
        updated_at=datetime.now(),
    )


def make_course_response(**kwargs) -> CourseResponse:
    department = make_department_response()
    return CourseResponse(
        id=kwargs.get("id", uuid.uuid4()),
        name="Génie logiciel",
        code=kwargs.get("code", "SWE"),
        department_id=department.id,
        duration=4,
        department=department,
    )


# ============================================================
# /api/departments
# ============================================================

def test_create_department_succes(client):
    with patch("app.routers.departments.department_service.create_department") as mock:
        mock.return_value = make_department_response(code="CS")
        response = client.post("/api/departments", json={"name": "Informatique", "code": "CS"})

    assert response.status_code == 201
    assert response.json()["code"] == "CS"
    assert "createdAt" in response.json()


def test_create_department_code_invalide(client):
    """Code en minuscules → 400 avec le détail par champ, rien n'est persisté."""
    with patch("app.routers.departments.department_service.create_department") as mock:
        response = client.post("/api/departments", json={"name": "Informatique", "code": "cs"})

    assert response.status_code == 400
    body = response.json()
    assert "majuscules" in body["error"]
    assert body["details"][0].startswith("code:")
    mock.assert_not_called()


def test_create_department_code_duplique(client):
    with patch("app.routers.departments.department_service.create_department") as mock:
        mock.side_effect = ConflictError("Un département avec ce code existe déjà.")
        response = client.post("/api/departments", json={"name": "Informatique", "code": "CS"})

    assert response.status_code == 400
    assert response.json() == {"error": "Un département avec ce code existe déjà."}


def test_list_departments(client):
    with patch("app.routers.departments.department_service.get_departments") as mock:
        mock.return_value = [make_department_response(), make_department_response(code="MATH")]
        response = client.get("/api/departments")

    assert response.status_code == 200
    assert [d["code"] for d in response.json()] == ["CS", "MATH"]


def test_get_department_inexistant(client):
    with patch("app.routers.departments.department_service.get_department", return_value=None):
        response = client.get(f"/api/departments/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"error": "Département introuvable."}


def test_get_department_id_invalide(client):
    response = client.get("/api/departments/pas-un-uuid")
    assert response.status_code == 400


def test_update_department_inexistant(client):
    with patch("app.routers.departments.department_service.update_department", return_value=None):
        response = client.put(
            f"/api/departments/{uuid.uuid4()}", json={"name": "Informatique", "code": "CS"}
        )
    assert response.status_code == 404


def test_delete_department_bloque(client):
    with patch("app.routers.departments.department_service.delete_department") as mock:
        mock.side_effect = ConflictError("Impossible de supprimer ce département.")
        response = client.delete(f"/api/departments/{uuid.uuid4()}")

    assert response.status_code == 400
    assert "Impossible" in response.json()["error"]


def test_delete_department_succes(client):
    with patch("app.routers.departments.department_service.delete_department", return_value=True):
        response = client.delete(f"/api/departments/{uuid.uuid4()}")

    assert response.status_code == 200
    assert response.json() == {"message": "Département supprimé."}


# ============================================================
# /api/courses
# ============================================================

def test_list_courses_filtre_par_departement(client):
    department_id = uuid.uuid4()
    with patch("app.routers.courses.course_service.get_courses") as mock:
        mock.return_value = [make_course_response()]
        response = client.get(f"/api/courses?departmentId={department_id}")

    assert response.status_code == 200
    assert response.json()[0]["department"]["code"] == "CS"
    assert mock.call_args.args[1] == department_id


def test_create_course_departement_inexistant(client):
    with patch("app.routers.courses.course_service.create_course") as mock:
        mock.side_effect = NotFoundError("Département introuvable.")
        response = client.post("/api/courses", json={
            "name": "Génie logiciel", "code": "SWE", "departmentId": str(uuid.uuid4()), "duration": 4,
        })

    assert response.status_code == 404
    assert response.json() == {"error": "Département introuvable."}


def test_create_course_duree_invalide(client):
    response = client.post("/api/courses", json={
        "name": "Génie logiciel", "code": "SWE", "departmentId": str(uuid.uuid4()), "duration": 12,
    })
    assert response.status_code == 400
    assert any(d.startswith("duration") for d in response.json()["details"])


# ============================================================
# /api/subjects
# ============================================================

def test_create_subject_succes(client):
    course = make_course_response()
    with patch("app.routers.subjects.subject_service.create_subject") as mock:
        mock.return_value = SubjectResponse(
            id=uuid.uuid4(), name="Algorithmique", code="CS101",
            course_id=course.id, semester=1, course=course,
        )
        response = client.post("/api/subjects", json={
            "name": "Algorithmique", "code": "CS101", "courseId": str(course.id), "semester": 1,
        })

    assert response.status_code == 201
    assert response.json()["courseId"] == str(course.id)
    assert response.json()["course"]["department"]["name"] == "Informatique"


def test_create_subject_plusieurs_erreurs(client):
    response = client.post("/api/subjects", json={
        "name": "Al", "code": "cs", "courseId": str(uuid.uuid4()), "semester": 0,
    })
    assert response.status_code == 400
    assert len(response.json()["details"]) == 3


def test_list_subjects_filtres(client):
    course_id = uuid.uuid4()
    with patch("app.routers.subjects.subject_service.get_subjects", return_value=[]) as mock:
        response = client.get(f"/api/subjects?courseId={course_id}")

    assert response.status_code == 200
    assert mock.call_args.args[1:] == (course_id, None)


def test_route_inconnue(client):
    response = client.get("/api/inconnu")
    assert response.status_code == 404
    assert "error" in response.json()
