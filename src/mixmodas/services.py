"""Service layer for catalog and account operations."""

import logging
from typing import List, Optional

from fastapi import HTTPException
from prometheus_client import Counter
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import Product, Store
from .models.user import User
from .schemas import ProductFields, ProductOut


logger = logging.getLogger(__name__)

PRODUCT_COUNTER = Counter("products_created_total", "Total products created")
USER_COUNTER = Counter("users_registered_total", "Total users registered")


def _handle_service_error(session: Session, exc: Exception, detail: str) -> None:
    """Rollback transaction and raise a generic HTTP 500 for store errors."""
    session.rollback()
    logger.exception("service layer error", exc_info=exc)
    raise HTTPException(status_code=500, detail=detail) from exc


def list_products(store: Store, category: Optional[str] = None) -> List[ProductOut]:
    """Return all products, or those whose category matches ignoring case."""

    session: Session = store.session()
    try:
        query = session.query(Product)
        if category:
            query = query.filter(func.lower(Product.category) == category.lower())
        return [ProductOut.model_validate(p) for p in query.order_by(Product.id).all()]
    except SQLAlchemyError as exc:
        _handle_service_error(session, exc, "Error fetching products")
    finally:
        session.close()


def create_product(store: Store, fields: ProductFields) -> ProductOut:
    """Insert a product and return it with its assigned id."""

    logger.info("create product name=%s category=%s", fields.name, fields.category)
    session: Session = store.session()
    try:
        product = Product(**fields.model_dump())
        session.add(product)
        session.commit()
        session.refresh(product)
        PRODUCT_COUNTER.inc()
        return ProductOut.model_validate(product)
    except SQLAlchemyError as exc:
        _handle_service_error(session, exc, "Error saving product")
    finally:
        session.close()


def create_user(store: Store, name: str, email: str, password_hash: str) -> None:
    """Insert a user.

    A duplicate email surfaces exactly like any other write failure.
    """
    logger.info("register user email=%s", email)
    session: Session = store.session()
    try:
        session.add(User(email=email, name=name, password_hash=password_hash))
        session.commit()
        USER_COUNTER.inc()
    except SQLAlchemyError as exc:
        _handle_service_error(session, exc, "Email already registered")
    finally:
        session.close()


def find_user_by_email(store: Store, email: str) -> Optional[User]:
    """Return the user registered under ``email`` or ``None``."""

    session: Session = store.session()
    try:
        user = session.get(User, email)
        if user is not None:
            session.expunge(user)
        return user
    except SQLAlchemyError as exc:
        _handle_service_error(session, exc, "Server error")
    finally:
        session.close()
