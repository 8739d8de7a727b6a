"""
Database configuration and session management
SQLite by default, PostgreSQL when DATABASE_URL points at it
"""

import os
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from shared.config import config
from shared.utils import ensure_directory, setup_logging

logger = setup_logging("database")

DEFAULT_SQLITE_PATH = Path(__file__).resolve().parent / "data" / "tourstack.db"


def build_database_url() -> str:
    """
    Build database URL from DATABASE_URL with fallback to a local SQLite file
    """
    database_url = config.get("database_url") or os.getenv("DATABASE_URL")
    if database_url:
        # Convert postgres:// to postgresql:// for SQLAlchemy compatibility
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)
        logger.info(f"Using DATABASE_URL from environment: {database_url.split('@')[-1]}")
        return database_url

    ensure_directory(str(DEFAULT_SQLITE_PATH.parent))
    logger.info(f"DATABASE_URL not set, using SQLite database at {DEFAULT_SQLITE_PATH}")
    return f"sqlite:///{DEFAULT_SQLITE_PATH}"


def create_database_engine():
    """Create SQLAlchemy engine with appropriate configuration"""
    database_url = build_database_url()

    try:
        if database_url.startswith("sqlite"):
            engine = create_engine(database_url, connect_args={"check_same_thread": False})
            logger.info("Using SQLite database engine")
        else:
            engine = create_engine(
                database_url,
                pool_pre_ping=True,  # Verify connections before use
                pool_recycle=3600,
                pool_size=10,
                max_overflow=20,
                echo=False,
            )
            logger.info("Using PostgreSQL database engine with connection pooling")

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection test successful")

        return engine
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database engine: {e}")
        raise


# Create engine and session
engine = create_database_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency for FastAPI to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_database():
    """Initialize database tables"""
    # Register models on Base.metadata before create_all
    import models.database  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables initialized successfully")
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database tables: {e}")
        raise
