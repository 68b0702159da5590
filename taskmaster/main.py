# taskmaster/main.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import logging

# Роутеры
from taskmaster.api.ai import router as ai_router
from taskmaster.api.attachment import router as attachment_router
from taskmaster.api.auth import router as auth_router
from taskmaster.api.comment import router as comment_router
from taskmaster.api.notification import router as notification_router
from taskmaster.api.task import router as task_router
from taskmaster.api.team import router as team_router
from taskmaster.api.user import router as user_router
from taskmaster.api.ws import router as ws_router

from taskmaster.core.settings import settings
from taskmaster.core.exceptions import BaseAppException, ValidationError
from taskmaster.database import init_db
from taskmaster.realtime.rooms import RoomManager
from taskmaster.services.ai_assistant import AIAssistant
from taskmaster.services.file_storage import LocalFileStorage

# Логирование
logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger("TaskMaster")

app = FastAPI(
    title="TaskMaster API",
    version="1.0.0",
    description="Task and team management backend with realtime updates",
)

# Долгоживущие объекты процесса, доступны через dependencies
app.state.rooms = RoomManager()
app.state.file_storage = LocalFileStorage.from_settings()
app.state.ai_assistant = AIAssistant.from_settings()

# Middlewares
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Роутеры
for router in (
    auth_router,
    user_router,
    team_router,
    task_router,
    comment_router,
    attachment_router,
    notification_router,
    ai_router,
):
    app.include_router(router, prefix=settings.API_PREFIX)
app.include_router(ws_router)

# Health check & root
@app.get("/", tags=["Health"])
def root():
    return {"status": "TaskMaster API is running!"}

@app.get("/health", tags=["Health"])
def health():
    return {"ok": True}

@app.on_event("startup")
async def startup_event():
    init_db()
    if not app.state.ai_assistant.configured:
        logger.info("AI assistant is not configured (OPENAI_API_KEY is empty)")
    logger.info("Starting TaskMaster API")

@app.on_event("shutdown")
async def shutdown_event():
    await app.state.ai_assistant.aclose()
    logger.info("Stopping TaskMaster API")

# Exception handlers

@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException):
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    if exc.status_code in (401, 403):
        logger.warning(f"{request.method} {request.url.path} denied: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(loc) or "request", "message": err.get("msg", "Invalid value")})
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": str(exc) or "Internal server error"})

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskmaster.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=settings.DEBUG,
    )
