"""Schema engines - adapters between use case schemas and validation libraries."""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from .protocols import SchemaEngine

try:
    from jsonschema import Draft202012Validator
    from jsonschema.validators import validator_for

    HAS_JSONSCHEMA = True
except ImportError:
    HAS_JSONSCHEMA = False


@dataclass(frozen=True)
class SchemaViolation:
    """One field-level validation failure."""

    path: Tuple[Any, ...]
    message: str
    kind: str = "invalid"

    @property
    def location(self) -> str:
        """Dotted path to the offending field ('' for the root value)."""
        return ".".join(str(part) for part in self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {"path": list(self.path), "message": self.message, "kind": self.kind}

    def __str__(self) -> str:
        if self.path:
            return f"{self.location}: {self.message}"
        return self.message


class PydanticSchemaEngine(SchemaEngine):
    """
    Validates values with pydantic.

    A schema is anything `pydantic.TypeAdapter` accepts: a `BaseModel`
    subclass, a `TypedDict` or an annotated type.

    Validation runs in strict mode: handlers receive the params exactly as
    passed, so a value is only accepted if it already has the declared
    types (`"3"` is not an `int`). Dataclass schemas therefore expect
    dataclass instances, not dicts.

    Usage:
        class CreateUser(BaseModel):
            username: str

        engine = PydanticSchemaEngine()
        engine.check(CreateUser, {"username": "albo"})  # True
    """

    def __init__(self):
        # id(schema) -> (schema, adapter); the schema is kept alive with its id
        self._adapters: Dict[int, Tuple[Any, TypeAdapter]] = {}

    def _adapter(self, schema: Any) -> TypeAdapter:
        cached = self._adapters.get(id(schema))
        if cached is not None and cached[0] is schema:
            return cached[1]
        adapter = TypeAdapter(schema)
        self._adapters[id(schema)] = (schema, adapter)
        return adapter

    def _validate(self, schema: Any, value: Any) -> Optional[PydanticValidationError]:
        try:
            self._adapter(schema).validate_python(value, strict=True)
        except PydanticValidationError as e:
            return e
        return None

    def check(self, schema: Any, value: Any) -> bool:
        return self._validate(schema, value) is None

    def errors(self, schema: Any, value: Any) -> List[SchemaViolation]:
        error = self._validate(schema, value)
        if error is None:
            return []
        return [
            SchemaViolation(
                path=tuple(item.get("loc", ())),
                message=item.get("msg", str(error)),
                kind=item.get("type", "invalid"),
            )
            for item in error.errors()
        ]

    def json_schema(self, schema: Any) -> Dict[str, Any]:
        return self._adapter(schema).json_schema()


class JSONSchemaEngine(SchemaEngine):
    """
    Validates values against JSON Schema documents with `jsonschema`.

    The validator class follows the document's `$schema` keyword and
    defaults to Draft 2020-12.
    """

    def __init__(self):
        if not HAS_JSONSCHEMA:
            raise ImportError(
                "jsonschema is required for JSONSchemaEngine. "
                "Install with: pip install dddam[jsonschema]"
            )

    def _validator(self, schema: Mapping):
        validator_cls = validator_for(schema, default=Draft202012Validator)
        return validator_cls(schema)

    def check(self, schema: Mapping, value: Any) -> bool:
        return self._validator(schema).is_valid(value)

    def errors(self, schema: Mapping, value: Any) -> List[SchemaViolation]:
        return [
            SchemaViolation(
                path=tuple(error.absolute_path),
                message=error.message,
                kind=str(error.validator),
            )
            for error in self._validator(schema).iter_errors(value)
        ]

    def json_schema(self, schema: Mapping) -> Dict[str, Any]:
        return dict(schema)


_pydantic_engine: Optional[PydanticSchemaEngine] = None
_json_schema_engine: Optional[JSONSchemaEngine] = None


def resolve_schema_engine(schema: Any) -> SchemaEngine:
    """
    Pick the shared engine for a schema.

    Mappings are treated as JSON Schema documents; everything else is
    handed to pydantic.
    """
    global _pydantic_engine, _json_schema_engine

    if isinstance(schema, Mapping):
        if _json_schema_engine is None:
            _json_schema_engine = JSONSchemaEngine()
        return _json_schema_engine

    if _pydantic_engine is None:
        _pydantic_engine = PydanticSchemaEngine()
    return _pydantic_engine
