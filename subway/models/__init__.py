"""Database models for the Subway application."""

# Import all models to register them with SQLAlchemy metadata
from subway.models.base import Base, BaseModel
from subway.models.network import Line, Section, Station

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # Network models
    "Line",
    "Section",
    "Station",
]
