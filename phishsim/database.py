# phishsim/database.py

from sqlmodel import SQLModel, Session, create_engine

from phishsim.config import settings

connect_args = {"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {}
engine = create_engine(settings.DB_URL, connect_args=connect_args)


def init_db():
    # models must be imported so their tables are registered on the metadata
    from phishsim import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
