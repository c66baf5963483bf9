import re
from typing import Any, Dict

from marshmallow import Schema, ValidationError, fields, pre_load, validate, validates, validates_schema

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _strip_fields(data, names):
    data = dict(data)
    for name in names:
        value = data.get(name)
        if isinstance(value, str):
            data[name] = value.strip()
    return data


class RegisterSchema(Schema):
    username = fields.Str(required=True)
    password = fields.Str(required=True)
    email = fields.Email(required=True)

    @pre_load
    def strip_identity(self, data: Dict[str, Any], **kwargs):
        return _strip_fields(data, ("username", "email"))

    @validates("username")
    def validate_username(self, value: str, **kwargs):
        if len(value) < 4:
            raise ValidationError("Username must have at least 4 characters")
        if not re.fullmatch(r"[A-Za-z0-9_]+", value):
            raise ValidationError("Username may only contain letters, numbers, and underscores")

    @validates("password")
    def validate_password(self, value: str, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters")
        if len(value.encode("utf-8")) > 64:
            raise ValidationError("Password must be at most 64 characters")
        if not re.search(r"\d", value):
            raise ValidationError("Password must have a number")
        if not re.search(r"[^A-Za-z0-9]", value):
            raise ValidationError("Password must have at least 1 special character")


class LoginSchema(Schema):
    username = fields.Str(required=True)
    password = fields.Str(required=True)

    @pre_load
    def strip_username(self, data: Dict[str, Any], **kwargs):
        return _strip_fields(data, ("username",))


class ShowSchema(Schema):
    title = fields.Str(required=True, validate=validate.Length(min=1))
    description = fields.Str(required=True, validate=validate.Length(min=1))
    poster = fields.Str(load_default=None, allow_none=True)
    duration = fields.Int(
        required=True, validate=validate.Range(min=1, error="Duration must be greater than 0")
    )

    @pre_load
    def strip_text(self, data: Dict[str, Any], **kwargs):
        return _strip_fields(data, ("title", "description", "poster"))


class ShowTimeSchema(Schema):
    show_id = fields.Int(required=True)
    show_date = fields.Date(required=True)
    start_time = fields.Str(required=True)
    price = fields.Float(
        required=True,
        validate=validate.Range(min=0, min_inclusive=False, error="Price must be greater than 0"),
    )

    @validates("start_time")
    def validate_start_time(self, value: str, **kwargs):
        if not TIME_PATTERN.match(value):
            raise ValidationError("Start time must use the HH:MM format")


class SeatSchema(Schema):
    row = fields.Int(required=True)
    col = fields.Int(required=True)


class SeatSelectionSchema(Schema):
    show_time_id = fields.Int(required=True)
    seats = fields.List(
        fields.Nested(SeatSchema),
        required=True,
        validate=validate.Length(min=1, error="Please select at least one seat"),
    )


class ProductLineSchema(Schema):
    product_id = fields.Int(required=True)
    quantity = fields.Int(
        load_default=1, validate=validate.Range(min=1, error="Quantity must be at least 1")
    )


class ProductQuantitySchema(Schema):
    quantity = fields.Int(required=True)


class DateRangeSchema(Schema):
    start_date = fields.Date(required=True)
    end_date = fields.Date(required=True)

    @validates_schema
    def validate_order(self, data, **kwargs):
        if data["end_date"] < data["start_date"]:
            raise ValidationError("End date must not be before start date", "end_date")


def error_list(exc):
    """Flatten a marshmallow error dict into ``[{"field", "msg"}]``."""
    errors = []
    for field, messages in (exc.messages or {}).items():
        if isinstance(messages, dict):
            messages = [str(messages)]
        for message in messages:
            errors.append({"field": field, "msg": message})
    return errors


register_schema = RegisterSchema()
login_schema = LoginSchema()
show_schema = ShowSchema()
show_time_schema = ShowTimeSchema()
seat_selection_schema = SeatSelectionSchema()
product_line_schema = ProductLineSchema()
product_quantity_schema = ProductQuantitySchema()
date_range_schema = DateRangeSchema()
