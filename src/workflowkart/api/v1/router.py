from fastapi import APIRouter

from src.workflowkart.api.v1 import workflows

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(workflows.router)
