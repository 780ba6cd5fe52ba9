import logging

from fastapi import FastAPI

from coursegrade.core.config import LOG_LEVEL
from coursegrade.core.errors import register_error_handlers
from coursegrade.core.logging_middleware import LoggingMiddleware
from coursegrade.db.init_db import init_db
from coursegrade.routers.admin_grading import router as admin_grading_router
from coursegrade.routers.assignments import router as assignments_router
from coursegrade.routers.auth import router as auth_router
from coursegrade.routers.evaluations import router as evaluations_router
from coursegrade.routers.feedback_templates import router as feedback_templates_router
from coursegrade.routers.final_tasks import router as final_tasks_router
from coursegrade.routers.grades import router as grades_router
from coursegrade.routers.groups import router as groups_router
from coursegrade.routers.quizzes import router as quizzes_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Coursegrade")

# Middleware
app.add_middleware(LoggingMiddleware)

register_error_handlers(app)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(grades_router, prefix="/grades", tags=["grades"])
app.include_router(quizzes_router, prefix="/quizzes", tags=["quizzes"])
app.include_router(assignments_router, prefix="/assignments", tags=["assignments"])
app.include_router(groups_router, prefix="/final/groups", tags=["final groups"])
app.include_router(final_tasks_router, prefix="/final", tags=["final tasks"])
app.include_router(admin_grading_router, prefix="/admin/final", tags=["admin grading"])
app.include_router(evaluations_router, prefix="/admin/final/evaluations", tags=["evaluations"])
app.include_router(
    feedback_templates_router,
    prefix="/admin/final/feedback-templates",
    tags=["feedback templates"],
)
