"""Product database table model."""

from decimal import Decimal

from sqlmodel import Field

from minimal_api.entities.core._base import EntityTable
from minimal_api.entities.service.product.entity import (
    AMOUNT_DECIMAL_PLACES,
    AMOUNT_MAX_DIGITS,
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
)


class ProductTable(EntityTable, table=True):
    """Database persistence model for products.

    Column types, nullability and lengths are declared here explicitly and
    mirror the limits the Product entity validates at the API boundary.
    """

    __tablename__ = "products"

    name: str = Field(max_length=NAME_MAX_LENGTH, nullable=False)
    description: str = Field(max_length=DESCRIPTION_MAX_LENGTH, nullable=False)
    price: float | None = Field(default=None, nullable=True)
    amount: Decimal | None = Field(
        default=None,
        max_digits=AMOUNT_MAX_DIGITS,
        decimal_places=AMOUNT_DECIMAL_PLACES,
        nullable=True,
    )
    active: bool = Field(nullable=False)
    teste: bool = Field(default=False, nullable=False)
