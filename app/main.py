from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog
from app.api.v1.routes.expense import router as expense_router
from app.api.v1.routes.group import router as group_router
from app.api.v1.routes.settlement import router as settlement_router
from app.api.v1.routes.system import router as system_router
from app.core.config import settings
from app.core.db_check import wait_for_db
from app.core.exceptions import LedgerIntegrityError
from app.core.logging import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    await wait_for_db()
    yield


app = FastAPI(title="Splito Backend", lifespan=lifespan)


@app.exception_handler(LedgerIntegrityError)
async def ledger_integrity_handler(request: Request, exc: LedgerIntegrityError):
    logger.error("ledger.integrity_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Group ledger is inconsistent"})


@app.get("/")
async def root():
    return {"message": "Splito Backend is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(group_router, prefix="/api/v1/groups")
app.include_router(expense_router, prefix="/api/v1/expenses")
app.include_router(settlement_router, prefix="/api/v1/settlements")
