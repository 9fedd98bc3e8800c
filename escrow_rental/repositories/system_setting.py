from sqlalchemy.orm import Session

from escrow_rental.db.models.system_setting import SystemSetting as SystemSettingModel

ADMIN_ADDRESS_KEY = "admin_address"


def get_setting(db: Session, key: str) -> str | None:
    """Get a system setting value by key."""
    setting = db.get(SystemSettingModel, key)
    return setting.value if setting else None


def get_admin_address(db: Session) -> str:
    """Get the administrator principal fixed at system initialization."""
    admin = get_setting(db, ADMIN_ADDRESS_KEY)
    if admin is None:
        raise RuntimeError("Administrator address not found. Check the initial migration.")
    return admin
