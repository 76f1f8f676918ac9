# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy résolve les relations et clés étrangères inter-modèles
# (relationship("Teacher") depuis User exige que teacher.py soit chargé).

from app.models.user import Admin, User  # noqa: F401  (doit précéder les profils)
from app.models.academic import Course, Department, Subject  # noqa: F401
from app.models.teacher import Teacher, TeacherSubject  # noqa: F401
from app.models.student import Enrollment, Student  # noqa: F401
from app.models.file_upload import FileUpload, SubjectFile  # noqa: F401
