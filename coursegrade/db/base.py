# import models so Base.metadata knows every table
from coursegrade.db.base_class import Base  # noqa: F401
from coursegrade.models import (  # noqa: F401
    appeal,
    assignment,
    evaluation,
    feedback_template,
    grade,
    group,
    profile,
    quiz,
    task,
)
