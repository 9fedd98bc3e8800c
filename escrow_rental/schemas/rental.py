from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, computed_field

from escrow_rental.domain.rental_lifecycle import RentalStatus, status_of


class Rental(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: int
    price: int
    seller: str
    buyer: str | None = None
    paid: bool
    received: bool
    confirmed: bool
    disputed: bool
    refunded: bool
    created_at: datetime
    asset_token_id: int

    @computed_field
    @property
    def status(self) -> RentalStatus:
        return status_of(self)


class RentalCreate(BaseModel):
    item_id: int = Field(..., ge=0, description="Unique item identifier, never reused")
    price: int = Field(..., gt=0, description="Rental price, must be greater than 0")


class RentalPayment(BaseModel):
    amount: int = Field(..., description="Amount sent, must equal the rental price")


class DisputeResolution(BaseModel):
    decision: bool = Field(
        ..., description="True settles in favour of the seller, False refunds the buyer"
    )
