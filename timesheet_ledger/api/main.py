from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from timesheet_ledger import __version__
from timesheet_ledger.api.routers import data, entries, reports
from timesheet_ledger.entries.store import EntryStore


class HealthStatus(BaseModel):
    status: str
    version: str


def create_app(store: EntryStore) -> FastAPI:
    app = FastAPI(title="Timesheet Ledger API")
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Create shared API v1 router
    api_v1 = APIRouter(prefix="/api/v1")

    @api_v1.get("/health")
    async def heath_check() -> HealthStatus:
        """Return health status of the API."""
        return {"status": "healthy", "version": __version__}

    api_v1.include_router(entries.router)
    api_v1.include_router(reports.router)
    api_v1.include_router(data.router)

    app.include_router(api_v1)
    return app
