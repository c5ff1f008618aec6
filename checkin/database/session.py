from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from checkin.config import SQLALCHEMY_DATABASE_URL


def build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # needed for SQLite + FastAPI worker threads
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, connect_args=connect_args)


# Create SQLAlchemy engine
engine = build_engine(SQLALCHEMY_DATABASE_URL)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declare a base class for your ORM models
Base = declarative_base()


def get_db():
    db = SessionLocal()  # Create a new session
    try:
        yield db  # Yield the session to be used
    finally:
        db.close()  # Close the session when done
