"""SQLAlchemy models and the DBStorage handle for the Portfolio API."""
from models.db_storage import DBStorage, classes

__all__ = ["DBStorage", "classes"]
