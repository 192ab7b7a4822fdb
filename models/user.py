from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text

from utils.security import hash_password, verify_password

# Columns that must never leave the credential store in an outward-facing shape
SENSITIVE_FIELDS = ("password_hash", "refresh_token")


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    # Most recently issued refresh token; NULL once logged out
    refresh_token = Column(Text, nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @password.setter
    def password(self, value):
        self.password_hash = hash_password(value)

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def __repr__(self):
        return f"<User username={self.username}>"
