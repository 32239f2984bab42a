import factory
import uuid
from factory.alchemy import SQLAlchemyModelFactory
from factory.faker import Faker

from src.tuition_track.database import models as db_models
from src.tuition_track.database.db_enums import UserRole, ClassActionTypeEnum
from src.tuition_track.database.utils import month_year_label, utc_now
from src.tuition_track.common.security_utils import HashedPassword
from tests.constants import TEST_PASSWORD

# Set by the db_session fixture before any factory is used.
test_db_session = None

class BaseFactory(SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        # AsyncSession.flush() is a coroutine; callers await flush/commit themselves.
        sqlalchemy_session_persistence = None

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        # This ensures the session is set before any factory is used
        if test_db_session is None:
            raise RuntimeError(
                "The 'test_db_session' global must be set before using factories."
            )
        cls._meta.sqlalchemy_session = test_db_session
        return super()._create(model_class, *args, **kwargs)


class UserFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    email = factory.Sequence(lambda n: f"user{n}@tuitiontrack.com")
    name = Faker("name")
    role = UserRole.STUDENT.value
    password = HashedPassword.get_hash(TEST_PASSWORD)
    email_verified = True
    is_active = True
    linked_tuitions = factory.LazyFunction(list)
    created_at = factory.LazyFunction(utc_now)

    class Meta:
        model = db_models.Users

class TeacherFactory(UserFactory):
    email = factory.Sequence(lambda n: f"teacher{n}@tuitiontrack.com")
    role = UserRole.TEACHER.value

class StudentFactory(UserFactory):
    email = factory.Sequence(lambda n: f"student{n}@tuitiontrack.com")
    role = UserRole.STUDENT.value


class TuitionFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    teacher_id = factory.LazyFunction(uuid.uuid4)
    teacher_name = Faker("name")
    subject = factory.Iterator(["Mathematics", "Physics", "Chemistry", "English"])
    start_time = "16:00"
    end_time = "17:30"
    days_per_week = 2
    planned_classes_per_month = 8
    current_month_year = factory.LazyFunction(month_year_label)
    taken_classes = 0
    student_id = None
    student_name = None
    student_email = None
    created_at = factory.LazyFunction(utc_now)
    updated_at = factory.LazyFunction(utc_now)

    class Meta:
        model = db_models.Tuitions


class ClassEventFactory(BaseFactory):
    id = factory.LazyFunction(uuid.uuid4)
    tuition_id = factory.LazyFunction(uuid.uuid4)
    action_type = ClassActionTypeEnum.INCREMENT.value
    added_by = factory.LazyFunction(uuid.uuid4)
    added_by_name = Faker("name")
    date = factory.LazyFunction(utc_now)
    created_at = factory.LazyAttribute(lambda o: o.date)
    class_date = factory.LazyAttribute(
        lambda o: o.date if o.action_type == ClassActionTypeEnum.INCREMENT.value else None
    )
    description = None

    class Meta:
        model = db_models.ClassEvents
