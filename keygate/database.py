from collections.abc import Generator

from sqlmodel import Session, SQLModel, create_engine

from keygate.config import settings

connect_args = (
    {"check_same_thread": False}
    if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite")
    else {}
)
engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI), connect_args=connect_args)


# make sure all SQLModel models are imported (keygate.models) before initializing DB
# otherwise, SQLModel might fail to initialize relationships properly


def init_db() -> None:
    # For PostgreSQL in production, manage the schema with migrations instead
    from keygate import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
