"""
Credential store: the only place account rows are read or written.

The token lifecycle depends on exactly four shapes:
- find_by_username_or_email
- find_by_id (optionally projecting columns out)
- create
- update_by_id (optionally skipping field validation / returning the row)
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from marshmallow import ValidationError
from sqlalchemy import or_

from models.db_storage import DBStorage
from models.schemas.user import AccountRecordSchema
from models.user import User

account_record_schema = AccountRecordSchema()

# Columns that may be changed through update_by_id
WRITABLE_FIELDS = {
    "username",
    "email",
    "full_name",
    "avatar",
    "cover_image",
    "password",
    "refresh_token",
}


class AccountStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def _validate(self, fields: Dict[str, Any]) -> None:
        checked = {k: v for k, v in fields.items() if k in account_record_schema.fields}
        errors = account_record_schema.validate(checked)
        if errors:
            raise ValidationError(errors)

    def find_by_username_or_email(self, username: str | None = None, email: str | None = None) -> Optional[User]:
        clauses = []
        if username:
            clauses.append(User.username == username.strip().lower())
        if email:
            clauses.append(User.email == email.strip().lower())
        if not clauses:
            return None
        return self.session.query(User).filter(or_(*clauses)).first()

    def find_by_id(self, account_id: str | None, exclude: Iterable[str] | None = None):
        """
        Load an account by id.

        Without `exclude` the mapped User is returned. With `exclude` only the
        remaining columns are selected and a plain dict is returned, so the
        excluded values never leave the database.
        """
        if not account_id:
            return None
        if exclude is None:
            return self.storage.get(User, str(account_id))
        excluded = set(exclude)
        columns = [c for c in User.__table__.columns if c.name not in excluded]
        row = (
            self.session.query(*columns)
            .filter(User.id == str(account_id))
            .first()
        )
        return row._asdict() if row is not None else None

    def create(self, **fields) -> User:
        self._validate(fields)
        user = User(**fields)
        self.storage.new(user)
        self.storage.save()
        return user

    def update_by_id(
        self,
        account_id: str,
        changes: Dict[str, Any],
        validate: bool = True,
        new: bool = True,
    ) -> Optional[User]:
        """
        Apply `changes` to one account and commit.

        validate=False skips the field rules, for token-only or
        already-checked mutations. Returns the updated account when `new`,
        None otherwise or when no account matches.
        """
        unknown = set(changes) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported account fields: {sorted(unknown)}")
        user = self.find_by_id(account_id)
        if user is None:
            return None
        if validate:
            self._validate(changes)
        for key, value in changes.items():
            setattr(user, key, value)
        self.storage.new(user)
        self.storage.save()
        return user if new else None
