"""API routes."""

from fastapi import APIRouter

from commons.api import admin, auth, chat, health, posts, service_requests, session, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(session.router, prefix="/session", tags=["session"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(chat.router, prefix="/chat", tags=["chat"])
router.include_router(service_requests.router, prefix="/requests", tags=["requests"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
