class LedgerError(Exception):
    """Base exception for ledger errors"""

    pass


class StorageReadError(LedgerError):
    """Persisted data could not be read or decoded"""

    pass


class StorageWriteError(LedgerError):
    """Persisting data failed"""

    pass


class ImportParseError(LedgerError):
    """A backup artifact was malformed and has been rejected"""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class EntryValidationError(LedgerError):
    """Caller-supplied entry or settings data failed boundary validation"""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems
