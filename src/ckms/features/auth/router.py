"""API routes for inspecting the authenticated caller."""
from fastapi import APIRouter, Depends
from typing import Annotated

from .schemas import AuthUser
from .security import get_current_user

router = APIRouter(
    tags=["Authentication"],
    prefix="/auth"
)


@router.get("/me", response_model=AuthUser)
async def read_current_user(current_user: Annotated[AuthUser, Depends(get_current_user)]):
    return current_user
