import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# DEV default secret. Set COURSEGRADE_SECRET_KEY in production.
SECRET_KEY = os.getenv("COURSEGRADE_SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE = timedelta(minutes=int(os.getenv("COURSEGRADE_TOKEN_MINUTES", "60")))

DATABASE_URL = os.getenv("COURSEGRADE_DATABASE_URL", f"sqlite:///{BASE_DIR}/coursegrade.db")

LOG_LEVEL = os.getenv("COURSEGRADE_LOG_LEVEL", "INFO")

# Final project rubric: weight grows with project complexity
WEEKLY_MAX_SCORES = {1: 50, 2: 100, 3: 150, 4: 150}
TOTAL_MAX_SCORE = sum(WEEKLY_MAX_SCORES.values())  # 450

DEFAULT_TASK_MAX_POINTS = 10

TASK_PRIORITIES = ("low", "medium", "high")
TASK_STATUSES = ("todo", "in_progress", "done", "graded", "appeal")
# statuses a group member may set by hand; the rest are driven by grading
MEMBER_TASK_STATUSES = ("todo", "in_progress", "done")

TEMPLATE_CATEGORIES = (
    "code_quality",
    "documentation",
    "testing",
    "implementation",
    "best_practices",
    "performance",
    "security",
    "ui_ux",
    "general",
)
