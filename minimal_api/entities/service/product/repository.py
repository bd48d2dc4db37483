"""Product repository."""

from datetime import UTC, datetime

from sqlalchemy import delete, insert, update
from sqlmodel import Session, select

from minimal_api.entities.service.product.entity import Product
from minimal_api.entities.service.product.table import ProductTable


class ProductRepository:
    """Data-access layer for products.

    Writes are issued as explicit INSERT/UPDATE/DELETE statements and return
    the number of rows the database reports as affected. Committing is left
    to the caller.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: str) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return Product.model_validate(row, from_attributes=True)

    def exists(self, product_id: str) -> bool:
        statement = select(ProductTable.id).where(ProductTable.id == product_id)
        return self._session.exec(statement).first() is not None

    def list_all(self) -> list[Product]:
        rows = self._session.exec(select(ProductTable)).all()
        return [Product.model_validate(row, from_attributes=True) for row in rows]

    def create(self, product: Product) -> int:
        row = ProductTable(id=product.id, **product.business_fields())
        statement = insert(ProductTable).values(**row.model_dump())
        return self._session.exec(statement).rowcount

    def update(self, product_id: str, product: Product) -> int:
        """Replace every business field of the product stored under product_id."""
        statement = (
            update(ProductTable)
            .where(ProductTable.id == product_id)
            .values(**product.business_fields(), updated_at=datetime.now(UTC))
        )
        return self._session.exec(statement).rowcount

    def delete(self, product_id: str) -> int:
        statement = delete(ProductTable).where(ProductTable.id == product_id)
        return self._session.exec(statement).rowcount
