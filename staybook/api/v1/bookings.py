"""Booking endpoints: reserve a listing for the caller and list the caller's bookings."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from staybook.api.v1.auth import get_current_user
from staybook.core.database import get_db
from staybook.schemas.auth import CurrentUser
from staybook.schemas.booking import BookingRequest, BookingResponse
from staybook.schemas.envelope import ApiResponse
from staybook.services import bookings as booking_service

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    body: BookingRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse[BookingResponse]:
    """
    Book a listing for the authenticated caller.

    Fails with 404 when the listing does not exist and 409 when the dates overlap
    an existing booking of the same listing.
    """
    result = booking_service.create_booking(db, body, current_user.username)
    return ApiResponse[BookingResponse](
        code=status.HTTP_201_CREATED,
        message="booking success",
        result=result,
    )


@router.get("/my", response_model=ApiResponse[list[BookingResponse]])
def get_my_bookings(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> ApiResponse[list[BookingResponse]]:
    """List the caller's bookings in the order they were made."""
    return ApiResponse[list[BookingResponse]](
        code=status.HTTP_200_OK,
        message="get my booked list",
        result=booking_service.list_my_bookings(db, current_user.username),
    )
