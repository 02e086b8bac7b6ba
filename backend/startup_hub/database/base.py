"""
Database engine, session factory and declarative base
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

import config

# Create engine with connection pooling
engine = create_engine(
    config.DATABASE_URL,
    pool_pre_ping=True,
    echo=False  # Set to True for SQL debugging
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency yielding a database session that is closed after the request
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
