"""Argument schema utilities.

Each tool declares a pydantic model for its arguments. The JSON Schema
advertised to clients is generated from that model and checked against
the Draft 7 meta-schema before a tool is registered.
"""

from typing import Any, Optional

from jsonschema import Draft7Validator
from pydantic import BaseModel, ValidationError
from pydantic_core import to_json


def create_tool_schema(model: type[BaseModel]) -> dict[str, Any]:
    """
    Create a JSON Schema from a tool's arguments model.

    Args:
        model: Pydantic model describing the tool's arguments

    Returns:
        JSON Schema dictionary

    Raises:
        jsonschema.SchemaError: If the generated schema is not valid Draft 7
    """
    schema = model.model_json_schema()
    schema.pop("title", None)
    check_schema(schema)
    return schema


def check_schema(schema: dict[str, Any]) -> None:
    """Raise jsonschema.SchemaError if `schema` is not a valid Draft 7 schema."""
    Draft7Validator.check_schema(schema)


def format_error_path(loc: tuple[Any, ...]) -> str:
    """Render a pydantic error location as a dotted path."""
    return ".".join(str(part) for part in loc)


def validate_arguments(
    model: type[BaseModel],
    data: Any
) -> tuple[Optional[BaseModel], list[str]]:
    """
    Validate raw arguments against a tool's arguments model.

    Args:
        model: Pydantic model to validate against
        data: Untyped argument payload

    Returns:
        Tuple of (validated model or None, list of "path: message" errors)
    """
    try:
        return model.model_validate(data), []
    except ValidationError as e:
        return None, [
            f"{format_error_path(err['loc'])}: {err['msg']}" if err["loc"] else err["msg"]
            for err in e.errors()
        ]


def serialize_result(data: Any) -> str:
    """
    Serialize a typed result to the text payload returned to callers.

    Fields the remote service did not send are omitted, so the payload
    mirrors the response the model was parsed from.
    """
    if isinstance(data, BaseModel):
        return data.model_dump_json(indent=2, exclude_unset=True)
    return to_json(data, indent=2).decode("utf-8")
