from escrow_rental.db.models.system_setting import SystemSetting
from escrow_rental.db.models.identity import Identity
from escrow_rental.db.models.token import Token, TokenCounter
from escrow_rental.db.models.ledger import Account, EscrowHolding
from escrow_rental.db.models.rental import Rental
from escrow_rental.db.models.event import RentalEvent

__all__ = [
    "SystemSetting",
    "Identity",
    "Token",
    "TokenCounter",
    "Account",
    "EscrowHolding",
    "Rental",
    "RentalEvent",
]
