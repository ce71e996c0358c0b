from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def create_db_engine(database_url: str):
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Check your .env file.")
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )


def create_session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)
