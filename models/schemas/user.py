from marshmallow import (
    Schema,
    fields,
    pre_load,
    validate,
    validates_schema,
    ValidationError,
    EXCLUDE,
)

from models.schemas.common import (
    PASSWORD_RE,
    name_validators,
    norm_email,
    phone_validators,
    strip_blank,
)

PROFILE_FIELDS = ("firstName", "lastName", "phone")


class SignupSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        error_messages={
            "required": "Email is required",
            "invalid": "Please provide a valid email address",
        },
    )
    password = fields.String(
        required=True,
        load_only=True,
        validate=[
            validate.Length(min=8, error="Password must be at least 8 characters long"),
            validate.Regexp(
                PASSWORD_RE,
                error="Password must contain at least one uppercase letter, one lowercase letter, and one number",
            ),
        ],
        error_messages={"required": "Password is required"},
    )
    first_name = fields.String(
        data_key="firstName",
        required=True,
        validate=name_validators("First name"),
        error_messages={"required": "First name is required"},
    )
    last_name = fields.String(
        data_key="lastName",
        required=True,
        validate=name_validators("Last name"),
        error_messages={"required": "Last name is required"},
    )
    phone = fields.String(load_default=None, validate=phone_validators)

    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = strip_blank(data, ("firstName", "lastName", "phone"))
        if "email" in data:
            data["email"] = norm_email(data["email"])
        return data


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        error_messages={
            "required": "Email is required",
            "invalid": "Please provide a valid email address",
        },
    )
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=1, error="Password cannot be empty"),
        error_messages={"required": "Password is required", "invalid": "Password must be a string"},
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=norm_email(data["email"]))
        return data


class RefreshTokenSchema(Schema):
    """Body of /refresh-token and /logout."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(
        data_key="refreshToken",
        required=True,
        validate=validate.Length(min=10, error="Invalid refresh token format"),
        error_messages={
            "required": "Refresh token is required",
            "invalid": "Refresh token must be a string",
        },
    )


class UpdateProfileSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    first_name = fields.String(data_key="firstName", validate=name_validators("First name"))
    last_name = fields.String(data_key="lastName", validate=name_validators("Last name"))
    phone = fields.String(validate=phone_validators)

    @pre_load
    def normalize(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        return strip_blank(data, PROFILE_FIELDS)

    @validates_schema
    def require_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field (firstName, lastName, or phone) must be provided")


class UserOutSchema(Schema):
    """Public projection returned by signup, login and profile update."""

    id = fields.String()
    email = fields.String()
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    phone = fields.String(allow_none=True)
    role = fields.Method("get_role")
    created_at = fields.DateTime(data_key="createdAt")

    def get_role(self, obj):
        return getattr(obj.role, "value", obj.role)


class ProfileOutSchema(UserOutSchema):
    is_verified = fields.Boolean(data_key="isVerified")
    updated_at = fields.DateTime(data_key="updatedAt")
