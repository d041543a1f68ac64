from __future__ import annotations

from students.models import StudentIn


class StudentValidationError(ValueError):
    pass


def validate_student(candidate: StudentIn) -> None:
    """Check a candidate record, raising on the first rule it breaks.

    Rules run in a fixed order: name, then age, then email. The same rules
    apply to create and update.
    """
    if not candidate.name:
        raise StudentValidationError("name is required")
    if candidate.age <= 0 or candidate.age > 150:
        raise StudentValidationError("age must be between 1 and 150")
    if not candidate.email:
        raise StudentValidationError("email is required")
