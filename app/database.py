from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
import os

# Allow overriding database via environment.
# Default is a lightweight local sqlite file for development.
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./directory.db")

_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class Base(DeclarativeBase):
	pass
