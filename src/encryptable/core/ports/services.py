from typing import Protocol, runtime_checkable


@runtime_checkable
class EncryptionService(Protocol):
    def encrypt(self, plaintext: str) -> str: ...

    def decrypt(self, ciphertext: str) -> str: ...


class DigestFunction(Protocol):
    def __call__(self, data: str) -> str: ...
