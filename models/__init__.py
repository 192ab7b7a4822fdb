from models.base_model import Base, BaseModel
from models.user import User, SENSITIVE_FIELDS
from models.db_storage import DBStorage
from models.account_store import AccountStore

__all__ = ["Base", "BaseModel", "User", "SENSITIVE_FIELDS", "DBStorage", "AccountStore"]
