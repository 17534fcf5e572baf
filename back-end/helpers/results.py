from enum import Enum
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel

class ErrorKind(str, Enum):
    VALIDATION = "validation"
    MALFORMED_ID = "malformed_id"
    NOT_FOUND = "not_found"
    SERVER = "server"

class FieldError(BaseModel):
    field: str
    message: str

class Success(BaseModel):
    ok: Literal[True] = True
    value: Any = None

class Failure(BaseModel):
    ok: Literal[False] = False
    kind: ErrorKind
    message: str
    errors: List[FieldError] = []
    student_id: Optional[str] = None

# Every student operation returns one of these instead of raising
Result = Union[Success, Failure]
