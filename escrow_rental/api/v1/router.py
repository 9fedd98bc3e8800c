from fastapi import APIRouter

from escrow_rental.api.routers import accounts, events, identities, rentals

api_router = APIRouter()

api_router.include_router(identities.router)
api_router.include_router(rentals.router)
api_router.include_router(events.router)
api_router.include_router(accounts.router)
