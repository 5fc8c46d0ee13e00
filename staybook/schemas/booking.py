"""Request/response schemas for the booking endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

# Longest stay accepted in a single booking.
MAX_NIGHTS = 365


class BookingRequest(BaseModel):
    """Reservation request for one listing over [check_in, check_out)."""

    listing_id: int = Field(..., ge=1, description="Listing to book.")
    check_in: date = Field(..., description="First night of the stay.")
    check_out: date = Field(..., description="Departure day (not a night of the stay).")
    guests: int = Field(default=1, ge=1, le=50, description="Number of guests.")

    @model_validator(mode="after")
    def validate_date_range(self) -> "BookingRequest":
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        if (self.check_out - self.check_in).days > MAX_NIGHTS:
            raise ValueError(f"A booking may cover at most {MAX_NIGHTS} nights")
        return self


class BookingResponse(BaseModel):
    """Booking summary returned to the requester."""

    id: int
    listing_id: int
    listing_title: str
    check_in: date
    check_out: date
    nights: int
    guests: int
    total_price: float
    status: str
    created_at: datetime | None = None
