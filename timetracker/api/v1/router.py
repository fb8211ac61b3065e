"""
API v1 Router
Main router for all API v1 endpoints
"""

from fastapi import APIRouter
from timetracker.api.v1.endpoints import (
    admin,
    auth,
    dashboard,
    departments,
    employees,
    health,
    organizations,
    projects,
    reports,
    tasks,
    time_entries,
)

api_router = APIRouter()

# Authentication endpoints
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["authentication"]
)

# Project management endpoints
api_router.include_router(
    projects.router,
    prefix="/projects",
    tags=["projects"]
)

# Task endpoints
api_router.include_router(
    tasks.router,
    prefix="/tasks",
    tags=["tasks"]
)

# Time entry endpoints
api_router.include_router(
    time_entries.router,
    prefix="/time-entries",
    tags=["time-entries"]
)

# Dashboard endpoints
api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["dashboard"]
)

# Employee management endpoints
api_router.include_router(
    employees.router,
    prefix="/employees",
    tags=["employees"]
)

# Department endpoints
api_router.include_router(
    departments.router,
    prefix="/departments",
    tags=["departments"]
)

# Organization endpoints
api_router.include_router(
    organizations.router,
    prefix="/organizations",
    tags=["organizations"]
)

# Administration endpoints
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"]
)

# Report endpoints
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["reports"]
)

# Health endpoints
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)
