"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import appointments, auth, doctor_schedules, health, users

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(doctor_schedules.router, tags=["Doctor Schedules"])
