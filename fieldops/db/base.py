"""
Import all models here to ensure they are registered with SQLAlchemy.
"""
# Import Base
from fieldops.models.base import Base

# Import all models
from fieldops.models.client import Client
from fieldops.models.job import Job
from fieldops.models.equipment import Equipment

# This allows alembic to auto-discover all models when creating migrations
