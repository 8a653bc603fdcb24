from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.dependencies import get_db
from app.services.system_services import check_db_service, system_metrics

router = APIRouter()

@router.get("/health")
async def health():
    return {"status": "ok"}

@router.get("/health/db")
async def db_health():
    return await check_db_service()

@router.get("/metrics")
async def metrics(db: AsyncSession = Depends(get_db)):
    return await system_metrics(db)
