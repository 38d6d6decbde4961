class Crypt:
    """Field-level directive, attached with ``Annotated[str, Crypt("encrypt", "decrypt")]``.

    Keys are kept as written; they are validated when the owning class is decorated.
    """

    __slots__ = ("keys",)

    def __init__(self, *keys: str) -> None:
        self.keys = tuple(keys)

    def __repr__(self) -> str:
        return f"Crypt({', '.join(repr(key) for key in self.keys)})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Crypt) and other.keys == self.keys

    def __hash__(self) -> int:
        return hash(("Crypt", self.keys))
