from fastapi import APIRouter

from app.api.routers import reservations, vehicles

api_router = APIRouter()

api_router.include_router(reservations.router)
api_router.include_router(vehicles.router)
