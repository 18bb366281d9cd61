"""Database layer package for all SQL and connectivity boundaries."""

from .connection import SQLAlchemyDatabaseConnection
from .interfaces import DatabaseConnectionPort, DatabaseHealthPort
from .session import db_create_engine

__all__ = [
	"DatabaseConnectionPort",
	"DatabaseHealthPort",
	"SQLAlchemyDatabaseConnection",
	"db_create_engine",
]
