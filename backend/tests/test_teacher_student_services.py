"""
Tests unitaires des services enseignants et étudiants (compte + profil
créés, modifiés et supprimés dans une même transaction).
"""

import uuid
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from app.errors import ConflictError, NotFoundError, ValidationFailedError
from app.models.student import Enrollment, Student
from app.models.teacher import Teacher, TeacherSubject
from app.models.user import User
from app.schemas.student import StudentCreate, StudentUpdate
from app.schemas.teacher import TeacherCreate, TeacherUpdate
from app.security import verify_password
from app.services.account_service import DUPLICATE_EMAIL
from app.services.student_service import create_student, delete_student, update_student
from app.services.teacher_service import (
    DUPLICATE_TEACHER_ID,
    create_teacher,
    delete_teacher,
    update_teacher,
)


# --- Helpers ---

def make_db_mock(get_value=None, scalar_value=None, scalars=None):
    db = MagicMock()
    db.get.return_value = get_value if get_value is not None else MagicMock()
    db.execute.return_value.scalar.return_value = scalar_value
    db.execute.return_value.scalars.return_value.all.return_value = scalars or []
    return db


def make_subject(code):
    subject = MagicMock()
    subject.id = uuid.uuid4()
    subject.code = code
    return subject


def added_of_type(db, model):
    return [c.args[0] for c in db.add.call_args_list if isinstance(c.args[0], model)]


def teacher_payload(subjects=None, **kwargs):
    return TeacherCreate(
        email=kwargs.get("email", "jean@test.com"),
        password=kwargs.get("password", "secret1"),
        name="Jean Dupont",
        profile={"teacherId": "TCH001", "departmentId": str(uuid.uuid4())},
        subjects=subjects or [],
    )


def student_payload(subjects=None):
    return StudentCreate(
        email="alice@test.com",
        password="secret1",
        name="Alice Martin",
        profile={
            "studentId": "STU2024001",
            "departmentId": str(uuid.uuid4()),
            "courseId": str(uuid.uuid4()),
            "year": 1,
            "semester": 1,
        },
        subjects=subjects or [],
    )


# ============================================================
# Validation des schémas
# ============================================================

def test_teacher_mot_de_passe_trop_court():
    with pytest.raises(ValidationError, match="6 caractères"):
        teacher_payload(password="12345")


def test_teacher_email_invalide():
    with pytest.raises(ValidationError):
        teacher_payload(email="pas-un-email")


def test_teacher_role_incoherent_rejete():
    with pytest.raises(ValidationError):
        TeacherCreate(
            email="jean@test.com", password="secret1", name="Jean", role="STUDENT",
            profile={"teacherId": "TCH001", "departmentId": str(uuid.uuid4())},
        )


def test_teacher_matricule_trop_court():
    with pytest.raises(ValidationError):
        TeacherCreate(
            email="jean@test.com", password="secret1", name="Jean",
            profile={"teacherId": "T1", "departmentId": str(uuid.uuid4())},
        )


def test_teacher_update_mot_de_passe_vide_ignore():
    data = TeacherUpdate(
        email="jean@test.com", name="Jean", password="",
        profile={"teacherId": "TCH001", "departmentId": str(uuid.uuid4())},
    )
    assert data.password is None


def test_student_annee_hors_bornes():
    with pytest.raises(ValidationError):
        StudentCreate(
            email="a@test.com", password="secret1", name="Alice",
            profile={
                "studentId": "STU001", "departmentId": str(uuid.uuid4()),
                "courseId": str(uuid.uuid4()), "year": 7, "semester": 1,
            },
        )


# ============================================================
# create_teacher
# ============================================================

def test_create_teacher_cree_compte_profil_et_classes():
    cs101, cs102 = make_subject("CS101"), make_subject("CS102")
    db = make_db_mock(scalar_value=None, scalars=[cs101, cs102])

    teacher = create_teacher(db, teacher_payload(subjects=[cs101.id, cs101.id, cs102.id]))

    users = added_of_type(db, User)
    assert len(users) == 1
    assert users[0].role == "TEACHER"
    assert verify_password("secret1", users[0].password_hash)
    assert teacher.user_id == users[0].id

    classes = added_of_type(db, TeacherSubject)
    assert [c.class_code for c in classes] == ["TCH001-CS101", "TCH001-CS102"]
    assert all(c.teacher_id == teacher.id for c in classes)
    db.commit.assert_called_once()


def test_create_teacher_sans_matieres():
    db = make_db_mock(scalar_value=None)
    create_teacher(db, teacher_payload())
    assert added_of_type(db, TeacherSubject) == []
    assert len(added_of_type(db, Teacher)) == 1


def test_create_teacher_email_deja_utilise():
    db = make_db_mock()
    db.execute.return_value.scalar.side_effect = [uuid.uuid4()]
    with pytest.raises(ConflictError, match=DUPLICATE_EMAIL):
        create_teacher(db, teacher_payload())
    db.add.assert_not_called()


def test_create_teacher_matricule_deja_utilise():
    db = make_db_mock()
    db.execute.return_value.scalar.side_effect = [None, uuid.uuid4()]
    with pytest.raises(ConflictError, match=DUPLICATE_TEACHER_ID):
        create_teacher(db, teacher_payload())


def test_create_teacher_departement_inexistant():
    db = make_db_mock(scalar_value=None)
    db.get.return_value = None
    with pytest.raises(NotFoundError):
        create_teacher(db, teacher_payload())


def test_create_teacher_echec_insertion_annule_tout():
    db = make_db_mock(scalar_value=None)
    db.flush.side_effect = [None, RuntimeError("insertion profil")]
    with pytest.raises(RuntimeError):
        create_teacher(db, teacher_payload())
    db.rollback.assert_called_once()
    db.commit.assert_not_called()


def test_create_teacher_conflit_au_commit():
    db = make_db_mock(scalar_value=None)
    db.commit.side_effect = IntegrityError("duplicate", None, None)
    with pytest.raises(ConflictError):
        create_teacher(db, teacher_payload())
    db.rollback.assert_called_once()


# ============================================================
# update_teacher / delete_teacher
# ============================================================

def make_teacher(teacher_id="OLD01", class_subject_codes=()):
    teacher = MagicMock()
    teacher.id = uuid.uuid4()
    teacher.user_id = uuid.uuid4()
    teacher.teacher_id = teacher_id
    teacher.user.password_hash = "hash-initial"
    classes = []
    for code in class_subject_codes:
        ts = MagicMock()
        ts.subject.code = code
        classes.append(ts)
    teacher.classes = classes
    return teacher


def teacher_update(password=None, teacher_id="TCH001"):
    return TeacherUpdate(
        email="nouveau@test.com", name="Jean Modifié", password=password,
        profile={"teacherId": teacher_id, "departmentId": str(uuid.uuid4())},
    )


def test_update_teacher_inexistant():
    db = make_db_mock()
    db.get.return_value = None
    assert update_teacher(db, uuid.uuid4(), teacher_update()) is None


def test_update_teacher_sans_mot_de_passe_conserve_le_hash():
    teacher = make_teacher(teacher_id="TCH001")
    db = make_db_mock(get_value=teacher, scalar_value=None)

    update_teacher(db, teacher.id, teacher_update())

    assert teacher.user.password_hash == "hash-initial"
    assert teacher.user.email == "nouveau@test.com"
    assert teacher.user.name == "Jean Modifié"
    db.commit.assert_called_once()


def test_update_teacher_avec_mot_de_passe_rehache():
    teacher = make_teacher()
    db = make_db_mock(get_value=teacher, scalar_value=None)
    update_teacher(db, teacher.id, teacher_update(password="nouveau1"))
    assert verify_password("nouveau1", teacher.user.password_hash)


def test_update_teacher_nouveau_matricule_recalcule_les_codes_de_classe():
    teacher = make_teacher(teacher_id="OLD01", class_subject_codes=["CS101"])
    db = make_db_mock(get_value=teacher, scalar_value=None)

    update_teacher(db, teacher.id, teacher_update(teacher_id="NEW01"))

    assert teacher.teacher_id == "NEW01"
    assert teacher.classes[0].class_code == "NEW01-CS101"


def test_update_teacher_email_pris_par_un_autre():
    teacher = make_teacher()
    db = make_db_mock(get_value=teacher, scalar_value=uuid.uuid4())
    with pytest.raises(ConflictError):
        update_teacher(db, teacher.id, teacher_update())
    db.commit.assert_not_called()


def test_delete_teacher_avec_classes():
    db = make_db_mock(get_value=make_teacher(), scalar_value=2)
    with pytest.raises(ConflictError, match="classes"):
        delete_teacher(db, uuid.uuid4())
    db.delete.assert_not_called()


def test_delete_teacher_supprime_profil_et_compte():
    teacher, user = make_teacher(), MagicMock()
    db = make_db_mock(scalar_value=0)
    db.get.side_effect = [teacher, user]

    assert delete_teacher(db, teacher.id) is True
    assert [c.args[0] for c in db.delete.call_args_list] == [teacher, user]
    db.commit.assert_called_once()


def test_delete_teacher_inexistant():
    db = make_db_mock()
    db.get.return_value = None
    assert delete_teacher(db, uuid.uuid4()) is False


# ============================================================
# Étudiants
# ============================================================

def test_create_student_avec_inscriptions():
    s1, s2 = uuid.uuid4(), uuid.uuid4()
    db = make_db_mock(scalar_value=None, scalars=[s1, s2])

    student = create_student(db, student_payload(subjects=[s1, s2, s1]))

    assert student.student_id == "STU2024001"
    assert added_of_type(db, User)[0].role == "STUDENT"
    enrollments = added_of_type(db, Enrollment)
    assert [e.subject_id for e in enrollments] == [s1, s2]
    assert all(e.student_id == student.id for e in enrollments)
    db.commit.assert_called_once()


def test_create_student_matiere_hors_filiere():
    s1, s2 = uuid.uuid4(), uuid.uuid4()
    db = make_db_mock(scalar_value=None, scalars=[s1])

    with pytest.raises(ValidationFailedError) as exc:
        create_student(db, student_payload(subjects=[s1, s2]))

    assert exc.value.extra == {"invalidIds": [str(s2)]}
    db.add.assert_not_called()


def test_create_student_filiere_inexistante():
    db = make_db_mock(scalar_value=None)
    db.get.side_effect = [MagicMock(), None]
    with pytest.raises(NotFoundError, match="Filière"):
        create_student(db, student_payload())


def test_create_student_matricule_duplique():
    db = make_db_mock()
    db.execute.return_value.scalar.side_effect = [None, uuid.uuid4()]
    with pytest.raises(ConflictError, match="matricule"):
        create_student(db, student_payload())


def test_update_student_met_a_jour_le_profil():
    student = MagicMock()
    student.user.password_hash = "hash-initial"
    db = make_db_mock(get_value=student, scalar_value=None)
    data = StudentUpdate(
        email="alice@test.com", name="Alice", profile={
            "studentId": "STU2024001", "departmentId": str(uuid.uuid4()),
            "courseId": str(uuid.uuid4()), "year": 2, "semester": 3,
        },
    )

    update_student(db, uuid.uuid4(), data)

    assert student.year == 2
    assert student.semester == 3
    assert student.user.password_hash == "hash-initial"
    db.commit.assert_called_once()


def test_delete_student_avec_inscriptions():
    db = make_db_mock(get_value=MagicMock(), scalar_value=4)
    with pytest.raises(ConflictError):
        delete_student(db, uuid.uuid4())


def test_delete_student_supprime_profil_et_compte():
    student, user = MagicMock(spec=Student), MagicMock()
    student.user_id = uuid.uuid4()
    db = make_db_mock(scalar_value=0)
    db.get.side_effect = [student, user]

    assert delete_student(db, uuid.uuid4()) is True
    assert db.delete.call_count == 2
