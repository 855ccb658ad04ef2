import pytest
from dataclasses import dataclass
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from dddam.protocols import SchemaEngine
from dddam.validation import (
    PydanticSchemaEngine,
    SchemaViolation,
    resolve_schema_engine,
)

try:
    import jsonschema  # noqa: F401
    from dddam.validation import JSONSchemaEngine

    HAS_JSONSCHEMA = True
except ImportError:
    HAS_JSONSCHEMA = False


# --- Schemas ---


class Point(BaseModel):
    x: float
    y: float
    z: float


class Shape(BaseModel):
    a: bool
    b: str
    c: Point


@dataclass
class Range:
    low: int
    high: int


class Counter(BaseModel):
    count: int
    limit: Optional[Annotated[int, Field(ge=0)]] = None


USER_SCHEMA = {
    "type": "object",
    "properties": {
        "username": {"type": "string"},
        "age": {"type": "number"},
    },
    "required": ["username"],
}


# --- SchemaViolation ---


def test_schema_violation_formatting():
    violation = SchemaViolation(path=("c", "x"), message="Input should be a number", kind="float_type")

    assert violation.location == "c.x"
    assert str(violation) == "c.x: Input should be a number"
    assert violation.to_dict() == {
        "path": ["c", "x"],
        "message": "Input should be a number",
        "kind": "float_type",
    }
    assert str(SchemaViolation(path=(), message="bad")) == "bad"


# --- Pydantic ---


def test_pydantic_engine_is_a_schema_engine():
    assert isinstance(PydanticSchemaEngine(), SchemaEngine)


def test_pydantic_engine_accepts_valid_nested_value():
    engine = PydanticSchemaEngine()
    value = {"a": False, "b": "", "c": {"x": 1.0, "y": 2.0, "z": 3.0}}

    assert engine.check(Shape, value) is True
    assert engine.errors(Shape, value) == []


def test_pydantic_engine_reports_nested_paths():
    engine = PydanticSchemaEngine()
    value = {"a": False, "b": "", "c": {"x": 1, "y": "two"}}

    assert engine.check(Shape, value) is False
    errors = engine.errors(Shape, value)
    assert [e.location for e in errors] == ["c.y", "c.z"]
    assert [e.kind for e in errors] == ["float_type", "missing"]


def test_pydantic_engine_supports_other_types():
    engine = PydanticSchemaEngine()

    assert engine.check(List[int], [1, 2])
    assert [e.location for e in engine.errors(List[int], [1, "x"])] == ["1"]
    assert engine.check(Annotated[int, Field(ge=0)], 2)
    assert not engine.check(Annotated[int, Field(ge=0)], -1)
    assert engine.check(Range, Range(1, 2))


def test_pydantic_engine_caches_adapters():
    engine = PydanticSchemaEngine()

    first = engine._adapter(Shape)
    second = engine._adapter(Shape)

    assert first is second


def test_pydantic_engine_json_schema():
    schema = PydanticSchemaEngine().json_schema(Point)

    assert schema["type"] == "object"
    assert set(schema["required"]) == {"x", "y", "z"}


def test_resolve_schema_engine_for_models():
    engine = resolve_schema_engine(Shape)

    assert isinstance(engine, PydanticSchemaEngine)
    assert resolve_schema_engine(Point) is engine


# --- JSON Schema ---


@pytest.mark.skipif(not HAS_JSONSCHEMA, reason="jsonschema not installed")
def test_json_schema_engine_valid_value():
    engine = JSONSchemaEngine()

    assert engine.check(USER_SCHEMA, {"username": "albo"})
    assert engine.errors(USER_SCHEMA, {"username": "albo", "age": 3}) == []


@pytest.mark.skipif(not HAS_JSONSCHEMA, reason="jsonschema not installed")
def test_json_schema_engine_errors():
    engine = JSONSchemaEngine()

    assert not engine.check(USER_SCHEMA, {})
    errors = engine.errors(USER_SCHEMA, {})
    assert len(errors) == 1
    assert errors[0].path == ()
    assert errors[0].kind == "required"
    assert "username" in errors[0].message

    errors = engine.errors(USER_SCHEMA, {"username": "albo", "age": "old"})
    assert [e.location for e in errors] == ["age"]
    assert errors[0].kind == "type"


@pytest.mark.skipif(not HAS_JSONSCHEMA, reason="jsonschema not installed")
def test_json_schema_engine_follows_schema_draft():
    engine = JSONSchemaEngine()
    draft4 = {"$schema": "http://json-schema.org/draft-04/schema#", "type": "integer"}

    assert engine.check(draft4, 3)
    assert not engine.check(draft4, "3")
    assert engine.json_schema(draft4) == draft4


@pytest.mark.skipif(not HAS_JSONSCHEMA, reason="jsonschema not installed")
def test_resolve_schema_engine_for_mappings():
    engine = resolve_schema_engine(USER_SCHEMA)

    assert isinstance(engine, JSONSchemaEngine)
    assert resolve_schema_engine({"type": "string"}) is engine


def test_pydantic_engine_does_not_convert_values():
    engine = PydanticSchemaEngine()

    assert engine.check(Counter, {"count": 3})
    assert not engine.check(Counter, {"count": "3"})
    assert not engine.check(Counter, {"count": 3, "limit": "5"})
    assert [e.kind for e in engine.errors(Counter, {"count": "3"})] == ["int_type"]
    assert not engine.check(Range, {"low": 1, "high": 2})
