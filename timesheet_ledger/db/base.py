from typing import Protocol


class KeyValueStorage(Protocol):
    """Durable storage of opaque serialized blobs.

    ``set`` and ``remove`` raise StorageWriteError on failure; ``get`` raises
    StorageReadError when the backend cannot be read.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage for tests and throwaway sessions"""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)
