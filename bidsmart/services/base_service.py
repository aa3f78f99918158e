from typing import Optional, Any
from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bidsmart.core.exceptions import AppError, DatabaseError
from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for request-scoped services that run one operation.

    ``execute`` validates the arguments, runs the operation and makes sure
    whatever escapes is an ``AppError`` the API layer can render.
    """

    def __init__(self, db_session: Optional[AsyncSession] = None):
        self.db_session = db_session
        self.logger = LOGGER

    async def execute(self, *args, **kwargs) -> Any:
        """Validate, then run.

        Raises:
            AppError: Subclass errors pass through unchanged; database failures
                become ``DatabaseError`` and anything else a plain 500 ``AppError``
        """
        try:
            self.validate(*args, **kwargs)
            return await self.run(*args, **kwargs)

        except AppError:
            raise

        except SQLAlchemyError as e:
            self.logger.error(
                f"Database error in {self.__class__.__name__}: {str(e)}",
                exc_info=True,
            )
            raise DatabaseError("Database operation failed", original_error=e)

        except Exception as e:
            self.logger.error(
                f"Service execution failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise AppError(f"Service execution failed: {str(e)}", original_error=e)

    def validate(self, *args, **kwargs):
        """Reject arguments before any I/O happens; the default accepts everything."""

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the operation."""
