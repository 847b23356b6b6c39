from collections.abc import Generator
import secrets

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from coursegrid.core.config import Settings, get_settings
from coursegrid.db.session import SessionLocal
from coursegrid.services.time_grid import TimeGrid


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_time_grid(settings: Settings = Depends(get_settings)) -> TimeGrid:
    return TimeGrid.from_settings(settings)


def require_admin(
    x_admin_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Gate for administrative triggers. Identity management lives outside this service."""
    if not settings.admin_api_key:
        return "admin"
    if x_admin_key is None or not secrets.compare_digest(x_admin_key, settings.admin_api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid admin key",
        )
    return "admin"
