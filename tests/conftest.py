"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from encryptable.digest import hmac_sha256

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Pluggable services
# ---------------------------------------------------------------------------


class HexService:
    """Reversible stand-in cipher: hex-encodes on encrypt, decodes on decrypt, and records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def encrypt(self, plaintext: str) -> str:
        self.calls.append(("encrypt", plaintext))
        return plaintext.encode("utf-8").hex()

    def decrypt(self, ciphertext: str) -> str:
        self.calls.append(("decrypt", ciphertext))
        return bytes.fromhex(ciphertext).decode("utf-8")


class FailingService(HexService):
    """Fails on a chosen plaintext, succeeds otherwise."""

    def __init__(self, poison: str) -> None:
        super().__init__()
        self.poison = poison

    def encrypt(self, plaintext: str) -> str:
        if plaintext == self.poison:
            self.calls.append(("encrypt", plaintext))
            raise OSError(f"cannot encrypt {plaintext!r}")
        return super().encrypt(plaintext)


def hex_of(value: str) -> str:
    return value.encode("utf-8").hex()


@pytest.fixture
def service() -> HexService:
    return HexService()


@pytest.fixture
def digest():
    return hmac_sha256("test_key")


@pytest.fixture
def write_module(tmp_path: Path):
    """Write Python source to a temporary module and return its path."""

    def _write(source: str, name: str = "models.py") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write
