from sqlalchemy import Column, String

from ..database import Base


class User(Base):
    """SQLAlchemy model for registered customers."""

    __tablename__ = "users"

    email = Column(String, primary_key=True)
    name = Column(String)
    password_hash = Column(String, nullable=False)
    role = Column(String, default="user", server_default="user", nullable=False)
