import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.core.exceptions import DatabaseError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Common ORM operations over a request-scoped session.

    Repositories never commit; services own the transaction boundary
    (see storefront.db.transaction). Read failures are translated to
    DatabaseError here.
    """

    model: Type[T]

    def __init__(self, session: Session):
        self.session = session

    def get(self, entity_id: int) -> Optional[T]:
        try:
            return self.session.get(self.model, entity_id)
        except SQLAlchemyError as e:
            logger.error(f"Lookup of {self.model.__name__} {entity_id} failed: {str(e)}")
            raise DatabaseError(f"Lookup failed: {str(e)}")

    def add(self, entity: T) -> T:
        self.session.add(entity)
        return entity

    def delete(self, entity: T) -> None:
        self.session.delete(entity)

    def scalars(self, stmt: Select) -> List[T]:
        try:
            return list(self.session.scalars(stmt).unique())
        except SQLAlchemyError as e:
            logger.error(f"Query on {self.model.__name__} failed: {str(e)}")
            raise DatabaseError(f"Query execution failed: {str(e)}")

    def first(self, stmt: Select) -> Optional[T]:
        try:
            return self.session.scalars(stmt.limit(1)).first()
        except SQLAlchemyError as e:
            logger.error(f"Query on {self.model.__name__} failed: {str(e)}")
            raise DatabaseError(f"Query execution failed: {str(e)}")

    def count(self, stmt: Select) -> int:
        """Row count of an arbitrary select, ignoring its ordering"""
        try:
            subquery = stmt.order_by(None).subquery()
            return self.session.scalar(select(func.count()).select_from(subquery)) or 0
        except SQLAlchemyError as e:
            logger.error(f"Count on {self.model.__name__} failed: {str(e)}")
            raise DatabaseError(f"Count query failed: {str(e)}")
