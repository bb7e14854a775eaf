from fastapi import APIRouter, Depends, Response, status

from wishlist_api.api.deps import get_wishlist_service
from wishlist_api.api.schemas.wishlist import (
    ApiErrorResponse,
    ProductRequest,
    ProductResponse,
    WishlistRequest,
    WishlistResponse,
)
from wishlist_api.services.wishlist import WishlistService

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=WishlistResponse,
    responses={409: {"model": ApiErrorResponse}, 422: {"model": ApiErrorResponse}},
)
def create_wishlist(payload: WishlistRequest, service: WishlistService = Depends(get_wishlist_service)):
    """
    Create the wishlist of `user_id`. Fails with 409 if the user already has one
    and with 422 when the summed quantities exceed the configured maximum.
    """
    products = [p.model_dump() for p in payload.products]
    wishlist = service.create(payload.user_id, products)
    return WishlistResponse.from_wishlist(wishlist)


@router.get("/{user_id}", response_model=WishlistResponse, responses={404: {"model": ApiErrorResponse}})
def get_wishlist(user_id: str, service: WishlistService = Depends(get_wishlist_service)):
    return WishlistResponse.from_wishlist(service.get_by_user_id(user_id))


@router.post(
    "/{user_id}/products",
    response_model=WishlistResponse,
    responses={404: {"model": ApiErrorResponse}, 409: {"model": ApiErrorResponse}, 422: {"model": ApiErrorResponse}},
)
def add_product(user_id: str, payload: ProductRequest, service: WishlistService = Depends(get_wishlist_service)):
    """
    Add a product. An id already on the list has its quantity increased by the
    requested amount instead of being replaced.
    """
    wishlist = service.add_product(user_id, payload.model_dump())
    return WishlistResponse.from_wishlist(wishlist)


@router.get(
    "/{user_id}/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ApiErrorResponse}},
)
def is_product_in_wishlist(user_id: str, product_id: str, service: WishlistService = Depends(get_wishlist_service)):
    return ProductResponse.from_product(service.is_product_in_wishlist(user_id, product_id))


@router.delete(
    "/{user_id}/products/{product_id}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    responses={404: {"model": ApiErrorResponse}, 409: {"model": ApiErrorResponse}},
)
def remove_product(user_id: str, product_id: str, service: WishlistService = Depends(get_wishlist_service)):
    # one unit per call; the line disappears with its last unit
    service.remove_product(user_id, product_id)
    return Response(status_code=status.HTTP_200_OK)
