"""Shared fixtures for integration tests."""

from pathlib import Path
from typing import Callable, Iterator

import pytest

from src.runner import Services, build_services
from src.shared.config.settings import Settings
from src.shared.db.connection import DatabaseManager


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """File-backed sqlite URL so state survives a service restart."""
    return f"sqlite:///{tmp_path / 'katabatic.db'}"


@pytest.fixture
def service_factory(
    settings: Settings, database_url: str, provider, clock
) -> Iterator[Callable[[], Services]]:
    """Build fresh services over the same database, closing each on teardown."""
    built: list[Services] = []

    def factory() -> Services:
        services = build_services(
            settings=settings,
            db=DatabaseManager(database_url),
            signal_provider=provider,
            clock=clock,
        )
        built.append(services)
        return services

    yield factory

    for services in built:
        services.db.close()
