"""Unit tests for descriptor models."""

import pytest
from pydantic import ValidationError

from encryptable.models import (
    FieldDescriptor,
    Operation,
    Shape,
    StructureDescriptor,
    TypeExpr,
)


def _field(name: str, shape: Shape = Shape.PLAIN, *ops: Operation, sibling: bool = False) -> FieldDescriptor:
    return FieldDescriptor(name=name, shape=shape, operations=frozenset(ops), has_digest_sibling=sibling)


class TestTypeExpr:
    def test_renders_bare_name(self) -> None:
        assert str(TypeExpr(name="str")) == "str"

    def test_renders_nested_arguments(self) -> None:
        expr = TypeExpr(name="dict", args=(TypeExpr(name="str"), TypeExpr(name="list", args=(TypeExpr(name="int"),))))
        assert str(expr) == "dict[str, list[int]]"

    def test_is_immutable(self) -> None:
        expr = TypeExpr(name="str")
        with pytest.raises(ValidationError):
            expr.name = "int"  # type: ignore[misc]


class TestFieldDescriptor:
    def test_defaults_to_no_operations(self) -> None:
        field = FieldDescriptor(name="name", shape=Shape.PLAIN)
        assert field.operations == frozenset()
        assert field.has_digest_sibling is False

    def test_digest_target_follows_naming_convention(self) -> None:
        assert _field("email").digest_target == "email_digest"

    def test_applies_only_to_declared_operations(self) -> None:
        field = _field("email", Shape.PLAIN, Operation.ENCRYPT)
        assert field.applies(Operation.ENCRYPT)
        assert not field.applies(Operation.DECRYPT)

    def test_unsupported_shape_never_applies(self) -> None:
        field = _field("age", Shape.UNSUPPORTED, Operation.ENCRYPT, Operation.DECRYPT)
        assert not field.applies(Operation.ENCRYPT)
        assert not field.applies(Operation.DECRYPT)

    def test_rejects_unknown_operation(self) -> None:
        with pytest.raises(ValidationError):
            FieldDescriptor(name="x", shape=Shape.PLAIN, operations=frozenset({"obfuscate"}))  # type: ignore[arg-type]


class TestStructureDescriptor:
    def test_digest_bindings_empty_without_digest(self) -> None:
        descriptor = StructureDescriptor(
            name="User",
            fields=(_field("email", Shape.PLAIN, Operation.ENCRYPT, sibling=True), _field("email_digest")),
            service="svc",
        )
        assert descriptor.digest_bindings == ()

    def test_digest_bindings_follow_field_order(self) -> None:
        descriptor = StructureDescriptor(
            name="User",
            fields=(
                _field("phone", Shape.PLAIN, Operation.ENCRYPT, sibling=True),
                _field("email", Shape.PLAIN, Operation.ENCRYPT, sibling=True),
                _field("email_digest"),
                _field("phone_digest"),
            ),
            service="svc",
            digest="digest",
        )
        assert [(b.source.name, b.target) for b in descriptor.digest_bindings] == [
            ("phone", "phone_digest"),
            ("email", "email_digest"),
        ]

    def test_field_names_preserve_order(self) -> None:
        descriptor = StructureDescriptor(name="User", fields=(_field("b"), _field("a")), service="svc")
        assert descriptor.field_names == ("b", "a")
