# marksheet/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marksheet.core.config import CONFIG
from marksheet.core.database import close_client, ensure_indexes, get_database
from marksheet.core.logger import get_logger
from marksheet.routes.auth_routes import router as auth_router
from marksheet.routes.dashboard_routes import router as dashboard_router
from marksheet.routes.marks_routes import router as marks_router
from marksheet.routes.student_routes import router as student_router
from marksheet.routes.teacher_routes import router as teacher_router
from marksheet.utils.helpers import utcnow

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_indexes(get_database())
    logger.info("Marksheet API started")
    yield
    close_client()
    logger.info("Marksheet API shutting down")


app = FastAPI(
    title="Marksheet Portal",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    # Submitted values are not echoed back; NaN and similar inputs are not valid JSON
    errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=422, content={"detail": errors})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
def health():
    return {"status": "OK", "timestamp": utcnow().isoformat()}


app.include_router(auth_router)
app.include_router(student_router)
app.include_router(marks_router)
app.include_router(dashboard_router)
app.include_router(teacher_router)
