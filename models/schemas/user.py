from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from models.schemas.common import (
    normalize_email,
    normalize_username,
    strip_or_none,
    validate_not_blank,
    validate_username,
)

REGISTER_FIELDS = ("fullName", "email", "username", "password")


class UserRegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, data_key="fullName", validate=validate_not_blank)
    email = fields.Email(required=True)
    username = fields.String(required=True, validate=[validate_username, validate.Length(max=64)])
    password = fields.String(required=True, load_only=True, validate=validate_not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "fullName" in data:
            data["fullName"] = strip_or_none(data["fullName"])
        if "email" in data:
            data["email"] = normalize_email(data["email"])
        if "username" in data:
            data["username"] = normalize_username(data["username"])
        return data


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if data.get("username"):
            data["username"] = normalize_username(data["username"])
        if data.get("email"):
            data["email"] = normalize_email(data["email"])
        return data


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(required=True, data_key="oldPassword", validate=validate_not_blank)
    new_password = fields.String(required=True, data_key="newPassword", validate=validate_not_blank)


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(data_key="fullName", validate=validate_not_blank)
    email = fields.Email()

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data)
        if "fullName" in data:
            data["fullName"] = strip_or_none(data["fullName"])
        if "email" in data:
            data["email"] = normalize_email(data["email"])
        return data


class AccountRecordSchema(Schema):
    """Field-level rules for a stored account, keyed by column name."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(validate=[validate_username, validate.Length(max=64)])
    email = fields.Email()
    full_name = fields.String(validate=[validate_not_blank, validate.Length(max=255)])
    avatar = fields.String(validate=validate_not_blank)
    cover_image = fields.String(allow_none=True)


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    avatar = fields.String(allow_none=True)
    cover_image = fields.String(data_key="coverImage", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
