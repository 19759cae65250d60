"""Factory functions for creating gateway instances."""

import os
from pathlib import Path
from typing import Optional

from smartspend.gateway.base import Gateway
from smartspend.gateway.rest_gateway import RestGateway
from smartspend.gateway.sqlalchemy_gateway import SQLAlchemyGateway


def default_data_dir(data_dir: Optional[str] = None) -> Path:
    """Resolve the local data directory.

    Args:
        data_dir: Explicit directory. If None, checks SMARTSPEND_DATA_DIR,
            then defaults to ~/.smartspend

    Returns:
        Existing directory path
    """
    if data_dir is None:
        data_dir = os.environ.get("SMARTSPEND_DATA_DIR")

    path = Path(data_dir) if data_dir is not None else Path.home() / ".smartspend"
    path.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_gateway(database_path: Optional[str] = None) -> SQLAlchemyGateway:
    """Create a SQLite-backed gateway.

    Args:
        database_path: Path to SQLite database file. If None, checks
            SMARTSPEND_DB_PATH, then defaults to <data dir>/gateway.db

    Returns:
        SQLAlchemyGateway instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("SMARTSPEND_DB_PATH")

    if database_path is None:
        database_path = str(default_data_dir() / "gateway.db")

    return SQLAlchemyGateway(f"sqlite:///{database_path}")


def create_rest_gateway(
    base_url: Optional[str] = None, api_key: Optional[str] = None
) -> RestGateway:
    """Create a REST gateway from arguments or SMARTSPEND_GATEWAY_URL / SMARTSPEND_API_KEY.

    Raises:
        ValueError: If no base URL is configured
    """
    base_url = base_url or os.environ.get("SMARTSPEND_GATEWAY_URL")
    api_key = api_key or os.environ.get("SMARTSPEND_API_KEY", "")
    if not base_url:
        raise ValueError("No gateway URL configured (set SMARTSPEND_GATEWAY_URL)")
    return RestGateway(base_url, api_key)


def create_gateway(
    gateway_url: Optional[str] = None,
    api_key: Optional[str] = None,
    database_path: Optional[str] = None,
) -> Gateway:
    """Pick the REST gateway when a URL is configured, SQLite otherwise."""
    if gateway_url or os.environ.get("SMARTSPEND_GATEWAY_URL"):
        return create_rest_gateway(gateway_url, api_key)
    return create_sqlite_gateway(database_path)
