"""Database setup for the product catalog and customer accounts."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Column, Float, ForeignKey, Integer, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()

SAMPLE_PRODUCT = {
    "name": "Sample Product",
    "description": "Sample description",
    "price": 29.99,
    "quantity": 10,
    "category": "Clothing",
}


class Product(Base):
    """SQLAlchemy model for a catalog product."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, default="")
    price = Column(Float, nullable=False)
    quantity = Column(Integer, default=0)
    image_path = Column(String)
    category = Column(String, default="Other")


class WishlistEntry(Base):
    """Relation between a user and a product they saved for later."""

    __tablename__ = "wishlist_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_email = Column(String, ForeignKey("users.email"))
    product_id = Column(Integer, ForeignKey("products.id"))


def init_schema(engine: Engine, seed: bool = True) -> None:
    """Create tables if they do not exist and insert the sample product once."""
    from .models.user import User  # noqa: F401  registers the users table

    Base.metadata.create_all(bind=engine)
    if not seed:
        return

    with Session(engine) as session:
        exists = (
            session.query(Product.id)
            .filter(Product.name == SAMPLE_PRODUCT["name"])
            .first()
        )
        if exists is None:
            session.add(Product(**SAMPLE_PRODUCT))
            session.commit()


def _make_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # the handle is shared between the threadpool workers serving requests
        connect_args["check_same_thread"] = False
    return create_engine(database_url, future=True, connect_args=connect_args)


class Store:
    """Handle on the relational store shared by all request handlers.

    A store that failed to open is still a valid object; ``available`` is
    ``False`` and handlers refuse to touch it.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine
        self._session_factory = None
        if engine is not None:
            self._session_factory = sessionmaker(
                bind=engine, autoflush=False, autocommit=False, future=True
            )

    @property
    def available(self) -> bool:
        return self._session_factory is not None

    @classmethod
    def open(cls, settings: Settings) -> "Store":
        """Connect to ``settings.database_url`` and bootstrap the schema."""
        try:
            engine = _make_engine(settings.database_url)
            with engine.connect():
                pass
            init_schema(engine, seed=settings.seed_sample_product)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("could not open database %s: %s", settings.database_url, exc)
            return cls()
        logger.info("database ready at %s", settings.database_url)
        return cls(engine)

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("store is not available")
        return self._session_factory()

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
