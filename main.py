import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub.config import settings
from taskhub.routers import (
    auth,
    tasks,
    subtasks,
    projects,
    manager_projects,
    users,
    hr,
    director,
    department_teams,
    notification,
    report,
)
from taskhub.services.scheduler import deadline_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TaskHub API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
app.include_router(subtasks.router, prefix="/subtasks", tags=["Subtasks"])
app.include_router(projects.router, prefix="/projects", tags=["Projects"])
app.include_router(manager_projects.router, prefix="/manager-projects", tags=["Manager Projects"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(hr.router, prefix="/hr", tags=["HR"])
app.include_router(director.router, prefix="/director", tags=["Director"])
app.include_router(department_teams.router, prefix="/department-teams", tags=["Department Teams"])
app.include_router(notification.router, prefix="/notification", tags=["Notifications"])
app.include_router(report.router, prefix="/report", tags=["Reports"])


# Every error leaves the API as {"error": message}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if exc.status_code == 404 and detail == "Not Found":
        detail = "Not found"
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    logger.info("Starting TaskHub API...")
    if settings.DEADLINE_SCHEDULER_ENABLED:
        deadline_scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down TaskHub API...")
    deadline_scheduler.stop()


@app.get("/")
def read_root():
    return {"message": "TaskHub API"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/scheduler/status")
def scheduler_status():
    return deadline_scheduler.get_scheduler_status()
