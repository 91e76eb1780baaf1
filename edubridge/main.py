import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from edubridge.config import get_settings
from edubridge.database.connection import close_mongo_connection, connect_to_mongo, get_database
from edubridge.database.indexes import ensure_indexes
from edubridge.routers.analytics import router as analytics_router
from edubridge.routers.announcements import router as announcements_router
from edubridge.routers.assignments import router as assignments_router
from edubridge.routers.attendance import router as attendance_router
from edubridge.routers.auth import router as auth_router
from edubridge.routers.chat import router as chat_router
from edubridge.routers.documents import router as documents_router
from edubridge.routers.enrollments import router as enrollments_router
from edubridge.routers.messages import router as messages_router
from edubridge.routers.programs import router as programs_router
from edubridge.routers.users import router as users_router
from edubridge.services.chatbot_client import close_chatbot
from edubridge.utils.errors import ErrorKind, HTTP_STATUS_BY_KIND, ServiceError
from edubridge.utils.realtime_bus import close_bus


logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    await connect_to_mongo()
    await ensure_indexes(get_database())
    try:
        yield
    finally:
        await close_bus()
        close_chatbot()
        await close_mongo_connection()


app = FastAPI(title="EduBridge API", lifespan=lifespan)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        ctx = first.get("ctx") or {}
        if "error" in ctx:
            # message of a ValueError raised by one of our validators
            message = str(ctx["error"])
        else:
            field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
            message = f"{field}: {first.get('msg')}"
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[ErrorKind.VALIDATION],
        content={"error": message, "kind": ErrorKind.VALIDATION.value},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[ErrorKind.INTERNAL],
        content={"error": "Something went wrong. Please try again.", "kind": ErrorKind.INTERNAL.value},
    )


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(programs_router)
app.include_router(enrollments_router)
app.include_router(assignments_router)
app.include_router(attendance_router)
app.include_router(announcements_router)
app.include_router(messages_router)
app.include_router(chat_router)
app.include_router(documents_router)
app.include_router(analytics_router)


@app.get("/")
async def root():

    db = get_database()
    collections = await db.list_collection_names()
    return {"message": "Connected to MongoDB!", "collections": collections}


@app.get("/health")
async def health():
    return {"status": "ok"}
