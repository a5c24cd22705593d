"""Centralized v1 API router: all module routers are included here."""

from fastapi import APIRouter

from farmlink.modules.accounts.admin_router import router as admin_accounts_router
from farmlink.modules.accounts.router import router as auth_router
from farmlink.modules.allocation.router import router as allocation_router
from farmlink.modules.availability.router import router as availability_router
from farmlink.modules.buyer.router import router as buyer_router
from farmlink.modules.delivery.router import admin_router as admin_delivery_router
from farmlink.modules.delivery.router import farmer_router as farmer_delivery_router
from farmlink.modules.orders.router import admin_router as admin_order_router
from farmlink.modules.orders.router import buyer_router as buyer_order_router
from farmlink.modules.payments.router import admin_router as admin_payment_router
from farmlink.modules.payments.router import farmer_router as farmer_payment_router
from farmlink.modules.performance.router import router as performance_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(auth_router)
v1_router.include_router(admin_accounts_router)
v1_router.include_router(admin_order_router)
v1_router.include_router(allocation_router)
v1_router.include_router(admin_delivery_router)
v1_router.include_router(admin_payment_router)
v1_router.include_router(availability_router)
v1_router.include_router(farmer_delivery_router)
v1_router.include_router(performance_router)
v1_router.include_router(farmer_payment_router)
v1_router.include_router(buyer_router)
v1_router.include_router(buyer_order_router)
