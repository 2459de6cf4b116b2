from fastapi import APIRouter

from src.api.ads import router as ads_router

api_router = APIRouter()
api_router.include_router(ads_router)
