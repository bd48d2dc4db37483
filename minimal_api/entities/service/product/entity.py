"""Entity: Product."""

from decimal import Decimal
from typing import Annotated

from pydantic import Field, PlainSerializer

from minimal_api.entities.core._base import Entity

NAME_MAX_LENGTH = 80
DESCRIPTION_MAX_LENGTH = 250
AMOUNT_MAX_DIGITS = 18
AMOUNT_DECIMAL_PLACES = 2

# JSON clients get a number, not pydantic's default decimal string
Amount = Annotated[
    Decimal,
    Field(max_digits=AMOUNT_MAX_DIGITS, decimal_places=AMOUNT_DECIMAL_PLACES),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class Product(Entity):
    """Product entity representing an item of the catalog.

    This is the domain model used both as the request payload and as the
    response body. An ``id`` sent by a client is never trusted; the store
    assigns it on create and takes it from the URL on update.
    """

    name: str = Field(
        min_length=1, max_length=NAME_MAX_LENGTH, description="Product name"
    )
    description: str = Field(
        min_length=1,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Product description",
    )
    price: float | None = Field(default=None, description="Unit price")
    amount: Amount | None = Field(default=None, description="Amount in stock")
    active: bool = Field(description="Whether the product is offered")
    teste: bool = Field(default=False, description="Legacy flag, not validated")

    def business_fields(self) -> dict:
        """Every persisted field except the identifier."""
        return self.model_dump(exclude={"id"})
