import math
from pydantic import BaseModel, Field, ValidationError, validator
from typing import Any, Dict, Union
from helpers.results import ErrorKind, Failure, FieldError, Result, Success

MAJORS = ["Chemistry", "Computer Science", "Finance", "English", "Math", "undecided"]

MAX_MERIT = 5000

Amount = Union[int, float]

class Scholarship(BaseModel):
    merit: Amount = 0
    other: Amount = 0

class Student(BaseModel):
    name: str
    age: int
    major: str
    scholarship: Scholarship

class StudentForm(BaseModel):
    """Flat field set submitted by the create form or a JSON body"""
    name: str = Field(..., min_length=2)
    age: int = 18
    major: str
    merit: Amount = 0
    other: Amount = 0

    @validator('age')
    def validate_age(cls, v):
        if v < 0:
            raise ValueError("Age cannot be negative")
        return v

    @validator('major')
    def validate_major(cls, v):
        if v not in MAJORS:
            raise ValueError(f'Major must be one of: {", ".join(MAJORS)}')
        return v

    @validator('merit', 'other')
    def validate_finite(cls, v):
        # NaN compares False against both bounds
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("Scholarship must be a finite number")
        return v

    @validator('merit')
    def validate_merit(cls, v):
        if v < 0:
            raise ValueError("Merit scholarship cannot be negative")
        if v > MAX_MERIT:
            raise ValueError(f"Merit scholarship cannot exceed {MAX_MERIT}")
        return v

    @validator('other')
    def validate_other(cls, v):
        if v < 0:
            raise ValueError("Other scholarship cannot be negative")
        return v

    def to_student(self) -> Student:
        return Student(
            name=self.name,
            age=self.age,
            major=self.major,
            scholarship=Scholarship(merit=self.merit, other=self.other)
        )

class StudentReplacement(StudentForm):
    """Full replacement: every field must be supplied, nothing falls back to a default"""
    age: int = Field(...)
    merit: Amount = Field(...)
    other: Amount = Field(...)

def validate_student(fields: Dict[str, Any], replace: bool = False) -> Result:
    """
    Builds a Student from a candidate field set.

    Blank values count as omitted, so create falls back to the defaults and
    replace reports the field as missing. Returns Success(value=Student) or a
    VALIDATION Failure listing every field that failed and why.
    """
    candidate = {key: value for key, value in fields.items() if value is not None and value != ""}
    form_class = StudentReplacement if replace else StudentForm

    try:
        form = form_class(**candidate)
    except ValidationError as e:
        errors = [
            FieldError(field=".".join(str(part) for part in error["loc"]) or "student", message=error["msg"])
            for error in e.errors()
        ]
        return Failure(
            kind=ErrorKind.VALIDATION,
            message=f"Student validation failed: {', '.join(error.field for error in errors)}",
            errors=errors
        )

    return Success(value=form.to_student())
