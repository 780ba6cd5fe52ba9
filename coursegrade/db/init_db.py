from coursegrade.db.base import Base
from coursegrade.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
