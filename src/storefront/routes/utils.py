from typing import Type, TypeVar

from flask import request
from marshmallow import Schema
from marshmallow import ValidationError as SchemaValidationError
from pydantic import BaseModel
from pydantic import ValidationError as QueryValidationError

from storefront.core.exceptions import ValidationError

M = TypeVar("M", bound=BaseModel)


def load_json(schema: Schema, partial: bool = False) -> dict:
    """Validate the JSON request body with a marshmallow schema"""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.load(body, partial=partial)
    except SchemaValidationError as err:
        raise ValidationError("Invalid request body", errors=err.messages)


def parse_query(model: Type[M]) -> M:
    """Validate the query string with a pydantic model"""
    try:
        return model.model_validate(request.args.to_dict())
    except QueryValidationError as err:
        errors = {}
        for e in err.errors():
            field = ".".join(str(part) for part in e["loc"]) or "query"
            errors[field] = e["msg"]
        raise ValidationError("Invalid query parameters", errors=errors)
