"""Product API router with CRUD operations."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.responses import JSONResponse

from minimal_api.api.http.deps import get_current_user, get_db_session, get_product_repository
from minimal_api.entities.service.product import Product, ProductRepository

CREATE_FAILED = "There was an error registering a product"
UPDATE_FAILED = "There was an error updating the product"
DELETE_FAILED = "There was an error removing the product"

router = APIRouter(tags=["products"])


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=message)


@router.get(
    "/products",
    response_model=list[Product],
    dependencies=[Depends(get_current_user)],
)
def list_products(
    repository: ProductRepository = Depends(get_product_repository),
) -> list[Product]:
    """List all products."""
    return repository.list_all()


@router.get("/product/{item_id}", response_model=Product)
def get_product(
    item_id: str, repository: ProductRepository = Depends(get_product_repository)
) -> Product:
    """Get a product by ID. Readable without a token."""
    product = repository.get(item_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post(
    "/product",
    status_code=status.HTTP_201_CREATED,
    response_model=Product,
    dependencies=[Depends(get_current_user)],
    responses={400: {"description": CREATE_FAILED}},
)
def create_product(
    product: Product,
    response: Response,
    session: Session = Depends(get_db_session),
    repository: ProductRepository = Depends(get_product_repository),
):
    """Create a new product under a freshly generated id."""
    # Any id in the payload is discarded
    new_product = Product(**product.business_fields())
    try:
        rows = repository.create(new_product)
        if rows == 0:
            session.rollback()
            return _bad_request(CREATE_FAILED)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Creating product failed: {}", e)
        return _bad_request(CREATE_FAILED)

    logger.info("Created product {}", new_product.id)
    response.headers["Location"] = f"/product/{new_product.id}"
    return new_product


@router.put(
    "/product/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
    responses={400: {"description": UPDATE_FAILED}},
)
def update_product(
    item_id: str,
    product_update: Product,
    session: Session = Depends(get_db_session),
    repository: ProductRepository = Depends(get_product_repository),
):
    """Replace every field of an existing product; the path id wins over the body."""
    if not repository.exists(item_id):
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        rows = repository.update(item_id, product_update)
        if rows == 0:
            session.rollback()
            return _bad_request(UPDATE_FAILED)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Updating product {} failed: {}", item_id, e)
        return _bad_request(UPDATE_FAILED)

    logger.info("Updated product {}", item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/product/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_user)],
    responses={400: {"description": DELETE_FAILED}},
)
def delete_product(
    item_id: str,
    session: Session = Depends(get_db_session),
    repository: ProductRepository = Depends(get_product_repository),
):
    """Delete a product."""
    if not repository.exists(item_id):
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        rows = repository.delete(item_id)
        if rows == 0:
            session.rollback()
            return _bad_request(DELETE_FAILED)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Deleting product {} failed: {}", item_id, e)
        return _bad_request(DELETE_FAILED)

    logger.info("Deleted product {}", item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
