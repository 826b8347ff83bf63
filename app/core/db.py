"""
Database engine, session factory and schema initialization
"""

import logging
from datetime import date
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Create the engine for DATABASE_URL once per process."""
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured; the file backend is active")
    return create_engine(
        settings.DATABASE_URL,
        connect_args=_connect_args(settings.DATABASE_URL),
        pool_pre_ping=True,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def init_db(engine: Engine, default_slug: str | None = None) -> None:
    """Create tables and make sure the default tenant row exists.

    Safe to call more than once: table creation is conditional and the
    default tenant is only inserted when its slug is absent. Called from the
    application lifespan instead of being checked on every query.
    """
    # models must be registered on Base before create_all
    from app.models import Tenant

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")

    slug = default_slug or settings.DEFAULT_TENANT_ID
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as db:
        if db.query(Tenant.id).filter(Tenant.slug == slug).first() is None:
            db.add(Tenant(
                slug=slug,
                bride_name="[Bride Name]",
                groom_name="[Groom Name]",
                wedding_date=date(2024, 12, 31),
                venue_name="[Venue Name]",
                venue_address="[Venue Address]",
                venue_map_link="https://maps.google.com",
            ))
            db.commit()
            logger.info(f"Default tenant '{slug}' created")
