"""
SQLAlchemy models for S.C.O.P.E.

This module exports all database models for easy importing and
ensures Alembic can discover them for migrations.
"""

# Import base classes
from src.models.base import AccountScopedMixin, Base, TimestampMixin

# Import all models (must be imported for Alembic autogenerate)
from src.models.events import Event
from src.models.team import TeamMember, TeamAssignment, TrafficControl, Supervisor
from src.models.categories import AssignmentCategory, TaskCategory
from src.models.tasks import EventTask, Profile

# Export all for easy importing
__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "AccountScopedMixin",
    # Event model
    "Event",
    # Team models
    "TeamMember",
    "TeamAssignment",
    "TrafficControl",
    "Supervisor",
    # Category models
    "AssignmentCategory",
    "TaskCategory",
    # Task and profile models
    "EventTask",
    "Profile",
]
