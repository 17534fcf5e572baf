from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from controllers.studentController import router as student_router
from database import StudentStore
from config import HOST, PORT, LOG_LEVEL
from helpers.helpers import FAILURE_STATUS, render_page
from helpers.method_override import MethodOverrideMiddleware
from helpers.results import ErrorKind, Failure
import logging
import uvicorn

# Set up logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

def create_app(store: Optional[StudentStore] = None) -> FastAPI:
    """Builds the application; the store is created at startup unless one is injected"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or StudentStore()
        await app.state.store.connect()
        try:
            yield
        finally:
            await app.state.store.close()

    app = FastAPI(
        title="Student Records",
        description="Server-rendered CRUD pages for student records",
        version="1.0.0",
        lifespan=lifespan
    )

    app.include_router(student_router, tags=["Students"])
    app.add_middleware(MethodOverrideMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.info(f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.detail}")
        failure = Failure(kind=ErrorKind.SERVER, message=str(exc.detail))
        return render_page(request, "error.html", {"error": failure}, status_code=FAILURE_STATUS)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error handling {request.method} {request.url.path}: {str(exc)}")
        failure = Failure(kind=ErrorKind.SERVER, message="Internal server error")
        return render_page(request, "error.html", {"error": failure}, status_code=FAILURE_STATUS)

    @app.get("/", include_in_schema=False)
    async def home():
        return RedirectResponse(url="/students")

    return app

app = create_app()

if __name__ == "__main__":
    logger.info(f"Server listening on port {PORT}...")
    uvicorn.run(app, host=HOST, port=PORT)
