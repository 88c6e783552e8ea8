from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from finquest.core.config import SQLALCHEMY_DATABASE_URL

# Trackers run in worker threads, so SQLite connections must be shareable
_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=_connect_args)

# Trackers read their rows after commit, keep loaded attributes
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def get_db():
    """Request-scoped session: commit on success, rollback on failure, always close"""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
