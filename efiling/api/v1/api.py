"""
API v1 Router Configuration
Aggregates all e-filing endpoints for version 1
"""

from fastapi import APIRouter

from efiling.api.v1.endpoints import (
    files,
    notifications,
    role_groups,
    templates,
    workflows,
)

# Create main API router
api_router = APIRouter()

api_router.include_router(files.router, prefix="/files", tags=["Files"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["Workflows"])
api_router.include_router(role_groups.router, prefix="/role-groups", tags=["Role Groups"])
api_router.include_router(templates.router, prefix="/templates", tags=["Workflow Templates"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["Notifications"]
)
