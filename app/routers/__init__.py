from app.routers.portfolio import router as portfolio_router
from app.routers.investments import router as investments_router
from app.routers.users import router as users_router

__all__ = ["portfolio_router", "investments_router", "users_router"]
