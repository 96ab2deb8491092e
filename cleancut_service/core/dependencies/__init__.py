"""FastAPI dependencies shared across features."""

from .auth import AccountIdDep, get_account_id
from .database import SessionDep, get_db_session
from .storage import AssetStoreDep

__all__ = ["AccountIdDep", "AssetStoreDep", "SessionDep", "get_account_id", "get_db_session"]
