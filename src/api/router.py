from __future__ import annotations

from fastapi import APIRouter

from src.api.dashboard import router as dashboard_router
from src.api.health import router as health_router
from src.api.insights import router as insights_router
from src.api.leaderboard import router as leaderboard_router
from src.api.reports import router as reports_router
from src.api.sales_records import router as sales_records_router
from src.api.targets import router as targets_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(sales_records_router)
api_router.include_router(dashboard_router)
api_router.include_router(reports_router)
api_router.include_router(leaderboard_router)
api_router.include_router(targets_router)
api_router.include_router(insights_router)
