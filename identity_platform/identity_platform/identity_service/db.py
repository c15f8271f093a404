from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from .config import settings

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()

def init_db():
    from .models import User  # Import here to avoid circular dependency

    Base.metadata.create_all(bind=engine)

    # The unique indexes on users.email and users.biometric_key are the
    # authoritative uniqueness guard; the service checks are only a fast path.
    inspector = inspect(engine)
    unique_columns = {
        tuple(idx["column_names"])
        for idx in inspector.get_indexes(User.__tablename__)
        if idx.get("unique")
    }
    for column in ("email", "biometric_key"):
        if (column,) not in unique_columns:
            logger.warning("users.%s has no unique index; uniqueness relies on service checks only", column)

    logger.info("Database initialized: %s", engine.url.render_as_string(hide_password=True))

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
