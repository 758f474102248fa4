"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Protected handlers take `claims: Claims = Depends(get_current_user)`
directly — they need the caller's id for ownership checks anyway, so
authentication is declared per route rather than per router. Health,
authenticate/logout and registration are open.
"""

from fastapi import APIRouter

from stormtask.api.auth import router as auth_router
from stormtask.api.groups import router as groups_router
from stormtask.api.health import router as health_router
from stormtask.api.tasks import router as tasks_router
from stormtask.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(groups_router, tags=["groups"])
api_router.include_router(tasks_router, tags=["tasks"])
