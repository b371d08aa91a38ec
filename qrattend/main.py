import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware

from qrattend.auth_router import router as auth_router
from qrattend.class_router import router as class_router
from qrattend.config import SECRET_KEY, configure_logging
from qrattend.db import engine, Base
from qrattend.errors import DomainError, ErrorCode, HTTP_STATUS
from qrattend.lecturer_router import router as lecturer_router
from qrattend.student_router import router as student_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Create database tables (if they don't exist)
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready")
    yield


middleware = [
    Middleware(SessionMiddleware, secret_key=SECRET_KEY)
]

app = FastAPI(title="QR Attendance", middleware=middleware, lifespan=lifespan)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    body = {"code": exc.code.value, "detail": exc.detail}
    body.update(exc.extra)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=HTTP_STATUS[ErrorCode.VALIDATION_FAILURE],
        content={"code": ErrorCode.VALIDATION_FAILURE.value, "detail": "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_STATUS[ErrorCode.INTERNAL_ERROR],
        content={"code": ErrorCode.INTERNAL_ERROR.value, "detail": "Internal server error"},
    )


# Include Routers
app.include_router(auth_router)
app.include_router(class_router)
app.include_router(lecturer_router)
app.include_router(student_router)


@app.get("/")
async def root():
    return {"service": "qr-attendance", "status": "ok"}
