from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from toto.config import Config

DATABASE_URL = Config.DATABASE_URL

# Create SQLAlchemy engine
engine = create_engine(
    DATABASE_URL, 
    connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {}
)

# Create session factory
SessionLocal = scoped_session(
    sessionmaker(autocommit=False, autoflush=False, bind=engine)
)

def init_db(bind=None):
    """Initialize the database with all models."""
    from toto.models.base import Base
    Base.metadata.create_all(bind=bind or engine)
