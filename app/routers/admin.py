from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.user import BlockRequest, RoleUpdateRequest, UserActionResponse, UserResponse
from app.services.admin_service import AdminService
from app.services.user_service import UserService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats")
def dashboard_stats(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return AdminService.dashboard_stats(db)


@router.get("/users", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return UserService.list_customers(db)


@router.put("/users/{user_id}/block", response_model=UserActionResponse)
def toggle_block_user(
    user_id: int,
    body: Optional[BlockRequest] = None,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    user = UserService.toggle_block(db, user_id, body.reason if body else None)
    action = "blocked" if user.is_blocked else "unblocked"
    return {"message": f"User {action} successfully", "user": user}


@router.put("/users/{user_id}/role", response_model=UserActionResponse)
def update_user_role(
    user_id: int,
    body: RoleUpdateRequest,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    user = UserService.update_role(db, user_id, body.role)
    return {"message": "User role updated successfully", "user": user}


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    UserService.delete_user(db, user_id)
    return {"message": "User deleted successfully"}
