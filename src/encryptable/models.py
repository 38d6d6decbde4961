from enum import Enum

from pydantic import BaseModel, ConfigDict


class Shape(str, Enum):
    PLAIN = "plain"
    OPTIONAL = "optional"
    LIST = "list"
    UNSUPPORTED = "unsupported"


class Operation(str, Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class TypeExpr(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    args: tuple["TypeExpr", ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(arg) for arg in self.args)}]"


TypeExpr.model_rebuild()  # necessary for recursive types


class FieldDeclaration(BaseModel):
    """A field as written by the author, before any validation."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeExpr
    directives: tuple[tuple[str, ...], ...] = ()


class StructureDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldDeclaration, ...] = ()
    options: dict[str, str] = {}


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    shape: Shape
    operations: frozenset[Operation] = frozenset()
    has_digest_sibling: bool = False

    @property
    def digest_target(self) -> str:
        return f"{self.name}_digest"

    def applies(self, operation: Operation) -> bool:
        """Whether the generated routine for ``operation`` transforms this field."""
        return self.shape is not Shape.UNSUPPORTED and operation in self.operations


class DigestBinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: FieldDescriptor
    target: str


class StructureDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[FieldDescriptor, ...]
    service: str
    digest: str | None = None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def digest_bindings(self) -> tuple[DigestBinding, ...]:
        if self.digest is None:
            return ()
        return tuple(DigestBinding(source=f, target=f.digest_target) for f in self.fields if f.has_digest_sibling)


class GeneratedRoutine(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    source: str
