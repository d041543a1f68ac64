from __future__ import annotations

import re
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
import logging
from pydantic import ValidationError
from starlette.datastructures import FormData
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from config.settings import Settings, get_settings
from students.models import Student, StudentIn, SummaryResponse
from students.store import StudentStore
from students.validation import StudentValidationError, validate_student
from summarizer.summarizer import OllamaSummarizer, SummarizerError


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("student_api")

WELCOME_TEXT = (
    "Welcome to the Student Management API\n"
    "You can use the following endpoints to manage students\n"
    "GET /students - Get all students\n"
    "POST /students - Create a new student\n"
    "GET /students/{id} - Get a student\n"
    "PUT /students/{id} - Update a student\n"
    "DELETE /students/{id} - Delete a student\n"
    "GET /students/{id}/summary - Get a summary of a student\n"
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def get_store(request: Request) -> StudentStore:
    return request.app.state.store


def get_summarizer(request: Request) -> OllamaSummarizer:
    return request.app.state.summarizer


def _parse_int(text: str) -> Optional[int]:
    # Optional sign and ASCII digits, nothing else.
    if not _INTEGER_RE.fullmatch(text):
        return None
    return int(text)


def _form_text(form: FormData, key: str) -> str:
    # File parts are ignored.
    value = form.get(key)
    return value if isinstance(value, str) else ""


def parse_student_id(student_id: str) -> int:
    value = _parse_int(student_id)
    if value is None:
        raise HTTPException(status_code=400, detail="Invalid ID")
    return value


async def parse_student_body(request: Request) -> StudentIn:
    """Read create/update fields from a JSON or form-encoded body.

    Only an exact ``application/json`` content type is decoded as JSON;
    everything else goes through the form parser.
    """
    if request.headers.get("content-type") == "application/json":
        body = await request.body()
        try:
            return StudentIn.model_validate_json(body)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Invalid JSON data")

    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException):
        raise HTTPException(status_code=400, detail="Invalid form data")

    age_raw = _form_text(form, "age")
    if not age_raw:
        raise HTTPException(status_code=400, detail="Age is required")
    age = _parse_int(age_raw)
    if age is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid age: {age_raw} (must be a number)",
        )
    try:
        return StudentIn(
            name=_form_text(form, "name"),
            age=age,
            email=_form_text(form, "email"),
        )
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid form data")


def _validated(candidate: StudentIn) -> StudentIn:
    try:
        validate_student(candidate)
    except StudentValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return candidate


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Student not found")


def create_app(
    store: Optional[StudentStore] = None,
    summarizer: Optional[OllamaSummarizer] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Student Management API", version="1.0.0")
    app.state.store = store if store is not None else StudentStore(settings.id_strategy)
    if summarizer is None:
        summarizer = OllamaSummarizer(settings=settings)
    app.state.summarizer = summarizer

    # CORS headers go on every /students response, errors included.
    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/students"):
            response.headers.update(CORS_HEADERS)
        return response

    @app.get("/", response_class=PlainTextResponse)
    def welcome() -> str:
        return WELCOME_TEXT

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/students", response_model=List[Student])
    def list_students(store: StudentStore = Depends(get_store)) -> List[Student]:
        return store.list()

    @app.post("/students", response_model=Student, status_code=201)
    def create_student(
        candidate: StudentIn = Depends(parse_student_body),
        store: StudentStore = Depends(get_store),
    ) -> Student:
        return store.create(_validated(candidate))

    @app.get("/students/{student_id}", response_model=Student)
    def get_student(
        student_id: int = Depends(parse_student_id),
        store: StudentStore = Depends(get_store),
    ) -> Student:
        student = store.get(student_id)
        if student is None:
            raise _not_found()
        return student

    @app.put("/students/{student_id}", response_model=Student)
    def update_student(
        student_id: int = Depends(parse_student_id),
        candidate: StudentIn = Depends(parse_student_body),
        store: StudentStore = Depends(get_store),
    ) -> Student:
        student = store.update(student_id, _validated(candidate))
        if student is None:
            raise _not_found()
        return student

    @app.delete("/students/{student_id}", status_code=204, response_class=Response)
    def delete_student(
        student_id: int = Depends(parse_student_id),
        store: StudentStore = Depends(get_store),
    ) -> Response:
        if not store.delete(student_id):
            raise _not_found()
        return Response(status_code=204)

    @app.get("/students/{student_id}/summary", response_model=SummaryResponse)
    def summarize_student(
        student_id: int = Depends(parse_student_id),
        store: StudentStore = Depends(get_store),
        summarizer: OllamaSummarizer = Depends(get_summarizer),
    ) -> SummaryResponse:
        student = store.get(student_id)
        if student is None:
            raise _not_found()

        logger.info("Generating summary for student id=%s", student_id)
        try:
            summary = summarizer.summarize(student)
        except SummarizerError as exc:
            logger.warning("Summary generation failed for id=%s: %s", student_id, exc)
            raise HTTPException(
                status_code=500,
                detail=f"Failed to generate summary: {exc}",
            )
        return SummaryResponse(student=student, summary=summary)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Server starting on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
