from fastapi import APIRouter

from userservice.api.endpoints import users, friends, enemies

api_router = APIRouter()

# Include routers
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(friends.router, prefix="/users/{user_id}/friends", tags=["friends"])
api_router.include_router(enemies.router, prefix="/users/{user_id}/enemies", tags=["enemies"])
