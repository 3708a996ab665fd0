from typing import Generator
from resolvix.core.database import SessionLocal

def get_db() -> Generator:
    """
    Request-scoped database session, closed once the response is sent.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
