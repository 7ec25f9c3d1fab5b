from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_store
from app.schemas.user import UserCreate, UserResponse
from app.services.store import PortfolioStore

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(user_data: UserCreate, store: PortfolioStore = Depends(get_store)):
    """Register a user. The password is stored as a bcrypt hash."""
    return await store.create_user(user_data.username, user_data.password)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, store: PortfolioStore = Depends(get_store)):
    user = await store.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
