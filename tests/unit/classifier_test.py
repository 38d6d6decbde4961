"""Unit tests for field shape classification."""

from typing import Annotated, Optional, Union

import pytest

from encryptable.core.classifier import classify_shape, has_digest_sibling, unwrap_annotated
from encryptable.core.introspect import type_expr_of
from encryptable.core.source import parse_type_text
from encryptable.markers import Crypt
from encryptable.models import Operation, Shape, TypeExpr


@pytest.mark.parametrize(
    ("annotation", "shape"),
    [
        (str, Shape.PLAIN),
        (Optional[str], Shape.OPTIONAL),  # noqa: UP045
        (Union[None, str], Shape.OPTIONAL),  # noqa: UP007
        (str | None, Shape.OPTIONAL),
        (list[str], Shape.LIST),
        (Annotated[str, Crypt("encrypt")], Shape.PLAIN),
        (Annotated[str | None, Crypt("encrypt")], Shape.OPTIONAL),
        (Optional[Annotated[str, Crypt("encrypt")]], Shape.OPTIONAL),  # noqa: UP045
        (list[Annotated[str, Crypt("encrypt")]], Shape.LIST),
        (int, Shape.UNSUPPORTED),
        (bytes, Shape.UNSUPPORTED),
        (list[int], Shape.UNSUPPORTED),
        (tuple[str, ...], Shape.UNSUPPORTED),
        (str | int, Shape.UNSUPPORTED),
        (str | int | None, Shape.UNSUPPORTED),
        (dict[str, str], Shape.UNSUPPORTED),
        (list[str] | None, Shape.UNSUPPORTED),
    ],
)
def test_classifies_runtime_annotations(annotation: object, shape: Shape) -> None:
    assert classify_shape(type_expr_of(annotation)) is shape


@pytest.mark.parametrize(
    ("text", "shape"),
    [
        ("str", Shape.PLAIN),
        ("builtins.str", Shape.PLAIN),
        ("Optional[str]", Shape.OPTIONAL),
        ("typing.Optional[str]", Shape.OPTIONAL),
        ("str | None", Shape.OPTIONAL),
        ("None | str", Shape.OPTIONAL),
        ("Union[str, None]", Shape.OPTIONAL),
        ("list[str]", Shape.LIST),
        ("List[str]", Shape.LIST),
        ("typing.List[str]", Shape.LIST),
        ("'str'", Shape.PLAIN),
        ('Annotated[str, Crypt("encrypt")]', Shape.PLAIN),
        ('Optional[Annotated[str, Crypt("encrypt")]]', Shape.OPTIONAL),
        ("list[Annotated[str, Crypt('encrypt')]]", Shape.LIST),
        ("Annotated[str, Crypt('encrypt')] | None", Shape.OPTIONAL),
        ("'Optional[str]'", Shape.OPTIONAL),
        ("int", Shape.UNSUPPORTED),
        ("list[int]", Shape.UNSUPPORTED),
        ("Optional[int]", Shape.UNSUPPORTED),
        ("dict[str, str]", Shape.UNSUPPORTED),
        ("Email", Shape.UNSUPPORTED),
    ],
)
def test_classifies_source_annotations(text: str, shape: Shape) -> None:
    assert classify_shape(parse_type_text(text)) is shape


def test_unwrap_annotated_strips_nested_layers() -> None:
    inner = TypeExpr(name="str")
    wrapped = TypeExpr(name="Annotated", args=(TypeExpr(name="typing.Annotated", args=(inner,)),))
    assert unwrap_annotated(wrapped) == inner


def test_shape_ignores_directives() -> None:
    with_directive = type_expr_of(Annotated[int, Crypt("encrypt")])
    without_directive = type_expr_of(int)
    assert classify_shape(with_directive) is classify_shape(without_directive) is Shape.UNSUPPORTED


class TestHasDigestSibling:
    def test_true_when_all_conditions_hold(self) -> None:
        assert has_digest_sibling("email", Shape.PLAIN, frozenset({Operation.ENCRYPT}), {"email", "email_digest"}, True)

    def test_false_without_digest_function(self) -> None:
        assert not has_digest_sibling(
            "email", Shape.PLAIN, frozenset({Operation.ENCRYPT}), {"email", "email_digest"}, False
        )

    def test_false_without_sibling_field(self) -> None:
        assert not has_digest_sibling("email", Shape.PLAIN, frozenset({Operation.ENCRYPT}), {"email"}, True)

    def test_false_for_decrypt_only_field(self) -> None:
        assert not has_digest_sibling(
            "email", Shape.PLAIN, frozenset({Operation.DECRYPT}), {"email", "email_digest"}, True
        )

    def test_false_for_unsupported_shape(self) -> None:
        assert not has_digest_sibling(
            "age", Shape.UNSUPPORTED, frozenset({Operation.ENCRYPT}), {"age", "age_digest"}, True
        )
