from fastapi import APIRouter

from walletdesk.interfaces.http.routers import admin, auth, customer


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(customer.router, prefix="/customer", tags=["customer"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    return router


__all__ = [
    "create_api_router",
]
