from fastapi import APIRouter, Depends
from app.core.deps import get_current_user
from app.models.user import User
from app.routers.auth import user_out
from app.schemas.auth import UserOut

router = APIRouter(prefix="/auth", tags=["me"])


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user_out(user)
