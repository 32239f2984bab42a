'''
Static enums mirrored by the database ENUM types.
'''
import enum


class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member names."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class UserRole(ListableEnum):
    TEACHER = 'teacher'
    STUDENT = 'student'


class ClassActionTypeEnum(ListableEnum):
    """The kind of change a class event recorded."""
    INCREMENT = 'increment'
    DECREMENT = 'decrement'
    MANUAL = 'manual'


class ClassCountAction(ListableEnum):
    """Actions accepted by the class count endpoint."""
    INCREMENT = 'increment'
    DECREMENT = 'decrement'
    RESET = 'reset'
