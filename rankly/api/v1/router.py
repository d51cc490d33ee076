from fastapi import APIRouter

from rankly.api.v1.metrics import router as metrics_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(metrics_router)
