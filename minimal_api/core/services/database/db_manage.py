"""Schema management for the product and user tables."""

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import SQLModel, create_engine

from minimal_api.runtime.context import get_config


class DbManageService:
    def __init__(self, engine: Engine | None = None):
        self._engine = engine or create_engine(
            get_config().database.connection_string, echo=False
        )

    def create_all(self) -> None:
        """Create all missing database tables."""
        # Importing the tables registers them on SQLModel.metadata
        from minimal_api.entities.core.user import UserTable  # noqa: F401
        from minimal_api.entities.service.product import ProductTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        """Drop every table. Only used by tests and ``init-db --reset``."""
        from minimal_api.entities.core.user import UserTable  # noqa: F401
        from minimal_api.entities.service.product import ProductTable  # noqa: F401

        SQLModel.metadata.drop_all(self._engine)
        logger.warning("Dropped all database tables.")
