from fastapi import HTTPException, Request

from timesheet_ledger.entries.store import EntryStore, MutationResult, MutationStatus


def get_store(request: Request) -> EntryStore:
    return request.app.state.store


def raise_for_result(result: MutationResult) -> MutationResult:
    """Translate a failed mutation into the matching HTTP error"""
    if result.status is MutationStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Entry not found")
    if result.status is MutationStatus.REJECTED:
        raise HTTPException(status_code=400, detail=str(result.error))
    if result.status is MutationStatus.WRITE_FAILED:
        raise HTTPException(status_code=503, detail="Could not save changes")
    return result


def raise_for_problems(problems: list[str]) -> None:
    if problems:
        raise HTTPException(status_code=422, detail=problems)
