from sqlalchemy import Column, Integer, String

from resolvix.core.database import Base


class AssignmentTracker(Base):
    __tablename__ = "assignment_tracker"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String(32), unique=True, nullable=False)
    # Last pool index handed out for this role; -1 means "never assigned".
    last_index = Column(Integer, nullable=False, default=-1)
