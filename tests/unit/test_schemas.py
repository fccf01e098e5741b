"""Tests for the schema contract and PydanticSchema."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

import pytest
from pydantic import BaseModel, Field, ValidationError

from fastapi_request_context.schemas import (
    ParseResult,
    PydanticSchema,
    Schema,
    SchemaBundle,
    SchemaShape,
    infer_shape,
)


class _Item(BaseModel):
    name: str
    price: float


class TestInferShape:
    @pytest.mark.parametrize(
        "tp",
        [
            str,
            Annotated[str, Field(min_length=1)],
            Union[str, Annotated[str, Field(max_length=3)]],
        ],
    )
    def test_string_shaped(self, tp: Any) -> None:
        assert infer_shape(tp) is SchemaShape.STRING

    @pytest.mark.parametrize(
        "tp",
        [
            int,
            _Item,
            dict[str, Any],
            Optional[str],
            Union[str, int],
            Literal["a", "b"],
            Union[Literal["a"], str],
        ],
    )
    def test_other_shaped(self, tp: Any) -> None:
        assert infer_shape(tp) is SchemaShape.OTHER

    def test_pep604_union_of_strings(self) -> None:
        tp = str | Annotated[str, Field(max_length=3)]
        assert infer_shape(tp) is SchemaShape.STRING


class TestPydanticSchema:
    def test_conforms_to_protocol(self) -> None:
        assert isinstance(PydanticSchema(int), Schema)

    def test_success_returns_validated_value(self) -> None:
        result = PydanticSchema(_Item).safe_parse({"name": "pen", "price": "1.5"})
        assert result.success
        assert result.data == _Item(name="pen", price=1.5)
        assert result.error is None

    def test_failure_carries_validation_error(self) -> None:
        result = PydanticSchema(_Item).safe_parse({"name": "pen"})
        assert not result.success
        assert result.data is None
        assert isinstance(result.error, ValidationError)

    def test_shape_is_inferred(self) -> None:
        assert PydanticSchema(str).shape is SchemaShape.STRING
        assert PydanticSchema(_Item).shape is SchemaShape.OTHER

    def test_explicit_shape_wins(self) -> None:
        schema = PydanticSchema(Any, shape=SchemaShape.STRING)
        assert schema.shape is SchemaShape.STRING


class TestSchemaBundle:
    def test_fields_default_to_none(self) -> None:
        bundle = SchemaBundle()
        assert bundle.body is None
        assert bundle.cookies is None
        assert bundle.headers is None
        assert bundle.query is None
        assert bundle.transform is False

    def test_is_frozen(self) -> None:
        bundle = SchemaBundle()
        with pytest.raises(AttributeError):
            bundle.transform = True  # type: ignore[misc]

    def test_accepts_any_schema_like_object(self) -> None:
        class AlwaysOk:
            shape = SchemaShape.OTHER

            def safe_parse(self, raw: Any) -> ParseResult:
                return ParseResult(success=True, data=raw)

        schema = AlwaysOk()
        assert isinstance(schema, Schema)
        assert SchemaBundle(query=schema).query is schema
