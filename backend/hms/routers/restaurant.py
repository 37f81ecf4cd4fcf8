"""
餐厅菜单路由
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hms.database import get_db
from hms.models.ontology import User
from hms.models.schemas import MenuItemCreate, MenuItemResponse, MenuResponse
from hms.services.menu_service import MenuService
from hms.security.auth import require_any_role, require_manager_or_owner

router = APIRouter(prefix="/restaurant", tags=["餐厅"])


@router.get("/menu", response_model=MenuResponse)
def get_menu(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_any_role)
):
    """早餐与菜单"""
    return MenuService(db).get_menu()


@router.post("/menu", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    data: MenuItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager_or_owner)
):
    """新增菜品"""
    try:
        return MenuService(db).create_item(data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
