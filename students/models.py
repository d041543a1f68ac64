from pydantic import BaseModel, Field


class StudentIn(BaseModel):
    """Fields a client supplies on create and update."""

    name: str = Field("", description="Full name, must not be empty")
    age: int = Field(0, description="Age in years, 1-150")
    email: str = Field("", description="Contact email, not format-checked")


class Student(BaseModel):
    """A stored record. The id is assigned by the store and never changes."""

    id: int
    name: str
    age: int
    email: str

    @classmethod
    def from_candidate(cls, student_id: int, candidate: StudentIn) -> "Student":
        return cls(id=student_id, **candidate.model_dump())


class SummaryResponse(BaseModel):
    student: Student
    summary: str
