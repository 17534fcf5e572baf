from fastapi import APIRouter, Depends, Request
from jinja2 import TemplateError
from pymongo.errors import PyMongoError
from typing import Any, Dict
import logging
from database import StudentStore
from models.Students import MAJORS, validate_student
from helpers.exceptions import StudentRecordsError
from helpers.helpers import FAILURE_STATUS, parse_object_id, render_page
from helpers.results import ErrorKind, Failure, Result, Success

logger = logging.getLogger(__name__)

router = APIRouter()

STORE_ERRORS = (PyMongoError, StudentRecordsError)

def get_store(request: Request) -> StudentStore:
    return request.app.state.store

def server_failure(message: str, student_id: str = None) -> Failure:
    return Failure(kind=ErrorKind.SERVER, message=message, student_id=student_id)

def malformed_id(student_id: str) -> Failure:
    return Failure(kind=ErrorKind.MALFORMED_ID, message=f"Invalid student ID: {student_id}", student_id=student_id)

def not_found(student_id: str) -> Failure:
    return Failure(kind=ErrorKind.NOT_FOUND, message=f"Student not found, ID={student_id}", student_id=student_id)

# Student operations: one store call each, failures returned rather than raised

async def fetch_students(store: StudentStore) -> Result:
    try:
        students = await store.list_students()
    except STORE_ERRORS as e:
        logger.error(f"Error listing students: {str(e)}")
        return server_failure("The server failed while looking up students")
    return Success(value=students)

async def create_student(store: StudentStore, fields: Dict[str, Any]) -> Result:
    validation = validate_student(fields)
    if not validation.ok:
        logger.info(validation.message)
        return validation

    try:
        student = await store.insert_student(validation.value.model_dump())
    except STORE_ERRORS as e:
        logger.error(f"Error creating student: {str(e)}")
        return server_failure("The server failed while saving the student")

    logger.info(f"Created student {student['id']}")
    return Success(value=student)

async def lookup_student(store: StudentStore, student_id: str) -> Result:
    object_id = parse_object_id(student_id)
    if object_id is None:
        return malformed_id(student_id)

    try:
        student = await store.find_student(object_id)
    except STORE_ERRORS as e:
        logger.error(f"Error getting student {student_id}: {str(e)}")
        return server_failure("The server failed while looking up the student", student_id)

    if student is None:
        return not_found(student_id)
    return Success(value=student)

async def update_student(store: StudentStore, student_id: str, fields: Dict[str, Any]) -> Result:
    """Full replacement: every field is required and the stored document is overwritten"""
    object_id = parse_object_id(student_id)
    if object_id is None:
        return malformed_id(student_id)

    validation = validate_student(fields, replace=True)
    if not validation.ok:
        logger.info(validation.message)
        return validation.model_copy(update={"student_id": student_id})

    try:
        student = await store.replace_student(object_id, validation.value.model_dump())
    except STORE_ERRORS as e:
        logger.error(f"Error updating student {student_id}: {str(e)}")
        return server_failure("The server failed while updating the student", student_id)

    if student is None:
        return not_found(student_id)

    logger.info(f"Replaced student {student_id}")
    return Success(value=student)

async def remove_student(store: StudentStore, student_id: str) -> Result:
    """Deleting an id that is already gone still succeeds"""
    object_id = parse_object_id(student_id)
    if object_id is None:
        return malformed_id(student_id)

    try:
        deleted_count = await store.delete_student(object_id)
    except STORE_ERRORS as e:
        logger.error(f"Error deleting student {student_id}: {str(e)}")
        return server_failure("The server failed while deleting the student", student_id)

    logger.info(f"Deleted {deleted_count} student(s) with ID {student_id}")
    return Success(value=deleted_count)

# Request helpers

async def read_fields(request: Request) -> Dict[str, Any]:
    """Reads a flat field set from a urlencoded, multipart or JSON body"""
    content_type = request.headers.get("content-type", "").split(";")[0].strip()

    if content_type == "application/json":
        try:
            payload = await request.json()
        except ValueError:
            logger.info("Ignoring malformed JSON body")
            return {}
        return payload if isinstance(payload, dict) else {}

    if content_type in ("application/x-www-form-urlencoded", "multipart/form-data"):
        form = await request.form()
        return dict(form)

    return {}

def render_failure(request: Request, failure: Failure, template: str = "error.html"):
    if failure.kind == ErrorKind.NOT_FOUND:
        return render_page(request, "student_notfound.html", {"student_id": failure.student_id}, status_code=FAILURE_STATUS)
    return render_page(request, template, {"error": failure}, status_code=FAILURE_STATUS)

# Routes

@router.get("/students")
async def list_students(request: Request, store: StudentStore = Depends(get_store)):
    result = await fetch_students(store)
    if not result.ok:
        return render_failure(request, result)
    return render_page(request, "students.html", {"students": result.value})

@router.get("/students/new")
async def new_student_form(request: Request):
    try:
        return render_page(request, "new_student_form.html", {"majors": MAJORS})
    except TemplateError as e:
        logger.error(f"Error rendering new student form: {str(e)}")
        return render_failure(request, server_failure("The new student form could not be displayed"))

@router.post("/students")
async def add_student(request: Request, store: StudentStore = Depends(get_store)):
    fields = await read_fields(request)
    result = await create_student(store, fields)
    if not result.ok:
        return render_failure(request, result, template="student_save_fail.html")
    return render_page(request, "new_student_data.html", {"student": result.value})

@router.get("/students/{student_id}")
async def get_student(request: Request, student_id: str, store: StudentStore = Depends(get_store)):
    result = await lookup_student(store, student_id)
    if not result.ok:
        return render_failure(request, result)
    return render_page(request, "student_page.html", {"student": result.value})

@router.get("/students/{student_id}/edit")
async def edit_student_form(request: Request, student_id: str, store: StudentStore = Depends(get_store)):
    result = await lookup_student(store, student_id)
    if not result.ok:
        return render_failure(request, result)
    return render_page(request, "student_update.html", {"student": result.value, "majors": MAJORS})

@router.put("/students/{student_id}")
async def replace_student(request: Request, student_id: str, store: StudentStore = Depends(get_store)):
    fields = await read_fields(request)
    result = await update_student(store, student_id, fields)
    if not result.ok:
        return render_failure(request, result)
    return render_page(request, "student_update_success.html", {"student": result.value})

@router.delete("/students/{student_id}")
async def delete_student(request: Request, student_id: str, store: StudentStore = Depends(get_store)):
    result = await remove_student(store, student_id)
    if not result.ok:
        return render_failure(request, result)
    return render_page(request, "student_delete_success.html", {"student_id": student_id})
