from sqlalchemy import Column, Integer, String, Float, DateTime, Text
from datetime import datetime
from .database import Base


class TaskTemplate(Base):
    """
    Duration template — the catalogue the task matcher reads from.

    Names carry the matching key: "building steps with bricks",
    "cutting 60cm porcelain slab", "tile installation 90 x 60", "mixing mortar".
    """
    __tablename__ = "task_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    unit = Column(String, default="piece")
    estimated_hours = Column(Float, nullable=True)  # Per unit; null = unknown
    notes = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
