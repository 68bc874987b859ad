"""Base database class with common connection logic."""

from pathlib import Path

from loguru import logger
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine


class BaseDatabase:
    """Base database class with common connection logic.

    Subclasses should call super().__init__(db_path) and may override
    _create_schema().
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file or ":memory:" for in-memory DB
        """
        self.db_path = str(db_path)
        if self.db_path == ":memory:":
            # One shared connection, otherwise every session sees an empty DB
            self.engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False,
            )
        else:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                connect_args={"check_same_thread": False},
                echo=False,
            )
        self._create_schema()
        logger.info(f"Database initialised: {self.db_path}")

    def _create_schema(self) -> None:
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Note:
            Caller is responsible for committing and closing the session.
        """
        return Session(self.engine)

    def close(self) -> None:
        if self.engine:
            self.engine.dispose()
            logger.info(f"Database connection closed: {self.db_path}")

    def __enter__(self) -> "BaseDatabase":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
