from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool
from sqlmodel import Session, create_engine

from minimal_api.api.http.app import create_app
from minimal_api.api.http.app_data import ApplicationDependencies
from minimal_api.core.services import (
    DbManageService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)


@pytest.fixture
def engine() -> Generator[Engine]:
    """Fresh in-memory database with every table created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DbManageService(engine).create_all()
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def database_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine=engine)


@pytest.fixture
def jwt_generator() -> JwtGeneratorService:
    return JwtGeneratorService()


@pytest.fixture
def jwt_verifier() -> JwtVerificationService:
    return JwtVerificationService()


@pytest.fixture
def app_dependencies(
    database_service: DbSessionService,
    jwt_generator: JwtGeneratorService,
    jwt_verifier: JwtVerificationService,
) -> ApplicationDependencies:
    return ApplicationDependencies(
        database_service=database_service,
        jwt_generation_service=jwt_generator,
        jwt_verify_service=jwt_verifier,
    )


@pytest.fixture
def client(app_dependencies: ApplicationDependencies) -> Generator[TestClient]:
    """TestClient over an app wired to the in-memory database."""
    app = create_app()
    app.state.app_dependencies = app_dependencies
    with TestClient(app) as client:
        yield client
