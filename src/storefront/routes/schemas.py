from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates

from storefront.utils.validators import ValidationUtils


class EmailField(fields.Str):
    """String field that validates and normalizes an email address"""

    def _deserialize(self, value, attr, data, **kwargs):
        raw = super()._deserialize(value, attr, data, **kwargs)
        try:
            return ValidationUtils.normalize_email(raw)
        except ValueError as e:
            raise ValidationError(str(e))


class BaseSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(BaseSchema):
    email = EmailField(required=True)
    password = fields.Str(required=True)
    first_name = fields.Str(data_key="firstName", load_default=None, allow_none=True, validate=validate.Length(max=100))
    last_name = fields.Str(data_key="lastName", load_default=None, allow_none=True, validate=validate.Length(max=100))
    phone = fields.Str(load_default=None, allow_none=True)
    locale = fields.Str(load_default="en", validate=validate.Regexp(ValidationUtils.PATTERNS["locale"]))

    @validates("password")
    def validate_password(self, value, **kwargs):
        problem = ValidationUtils.password_problem(value)
        if problem:
            raise ValidationError(problem)

    @validates("phone")
    def validate_phone(self, value, **kwargs):
        if value is not None and not ValidationUtils.validate_phone_number(value):
            raise ValidationError("Invalid phone number")


class LoginSchema(BaseSchema):
    email = fields.Str(required=True, validate=validate.Length(min=1))
    password = fields.Str(required=True, validate=validate.Length(min=1))


class ProfileUpdateSchema(BaseSchema):
    first_name = fields.Str(data_key="firstName", allow_none=True, validate=validate.Length(max=100))
    last_name = fields.Str(data_key="lastName", allow_none=True, validate=validate.Length(max=100))
    locale = fields.Str(validate=validate.Regexp(ValidationUtils.PATTERNS["locale"]))


class ChangePasswordSchema(BaseSchema):
    # Emptiness and type are checked by UsersService.change_password
    old_password = fields.Raw(data_key="oldPassword", load_default=None, allow_none=True)
    new_password = fields.Raw(data_key="newPassword", load_default=None, allow_none=True)


class AddressSchema(BaseSchema):
    first_name = fields.Str(data_key="firstName", allow_none=True, validate=validate.Length(max=100))
    last_name = fields.Str(data_key="lastName", allow_none=True, validate=validate.Length(max=100))
    company = fields.Str(allow_none=True, validate=validate.Length(max=200))
    address_line1 = fields.Str(data_key="addressLine1", required=True, validate=validate.Length(min=1, max=255))
    address_line2 = fields.Str(data_key="addressLine2", allow_none=True, validate=validate.Length(max=255))
    city = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    state = fields.Str(allow_none=True, validate=validate.Length(max=100))
    postal_code = fields.Str(data_key="postalCode", allow_none=True, validate=validate.Length(max=20))
    country_code = fields.Str(
        data_key="countryCode", required=True, validate=validate.Regexp(ValidationUtils.PATTERNS["country_code"])
    )
    phone = fields.Str(allow_none=True)
    is_default = fields.Bool(data_key="isDefault")

    @validates("phone")
    def validate_phone(self, value, **kwargs):
        if value is not None and not ValidationUtils.validate_phone_number(value):
            raise ValidationError("Invalid phone number")


class AddCartItemSchema(BaseSchema):
    product_id = fields.Int(data_key="productId", required=True, strict=True)
    variant_id = fields.Int(data_key="variantId", load_default=None, allow_none=True, strict=True)
    quantity = fields.Int(load_default=1, strict=True, validate=validate.Range(min=1, max=99))


class UpdateCartItemSchema(BaseSchema):
    quantity = fields.Int(required=True, strict=True, validate=validate.Range(min=1, max=99))


class ProductVariantSchema(BaseSchema):
    sku = fields.Str(load_default=None, allow_none=True, validate=validate.Length(min=1, max=100))
    price = fields.Decimal(places=2, load_default=None, allow_none=True, validate=validate.Range(min=0))
    stock = fields.Int(load_default=0, strict=True, validate=validate.Range(min=0))
    options = fields.Dict(keys=fields.Str(), values=fields.Str(), load_default=dict)


class ProductCreateSchema(BaseSchema):
    title = fields.Str(required=True, validate=validate.Length(min=1, max=500))
    sku = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    slug = fields.Str(
        load_default=None, allow_none=True, validate=validate.Regexp(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    )
    description = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=5000))
    price = fields.Decimal(places=2, required=True, validate=validate.Range(min=0))
    compare_at_price = fields.Decimal(
        data_key="compareAtPrice", places=2, load_default=None, allow_none=True, validate=validate.Range(min=0)
    )
    currency = fields.Str(load_default="USD", validate=validate.Regexp(r"^[A-Z]{3}$"))
    stock = fields.Int(load_default=0, strict=True, validate=validate.Range(min=0))
    published = fields.Bool(load_default=True)
    image = fields.Str(load_default=None, allow_none=True)
    category_id = fields.Int(data_key="categoryId", load_default=None, allow_none=True, strict=True)
    brand_id = fields.Int(data_key="brandId", load_default=None, allow_none=True, strict=True)
    variants = fields.List(fields.Nested(ProductVariantSchema), load_default=list)
