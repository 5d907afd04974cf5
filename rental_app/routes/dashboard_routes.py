from core.get_current_user import get_current_user
from core.get_db import get_db_async
from core.safe_handler import safe_handler
from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv
from models.models import User
from services.dashboard_service import DashboardService
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["Dashboard"])


@cbv(router=router)
class DashboardRoutes:
    @router.get("/dashboard")
    @safe_handler
    async def summary(
        self,
        db: AsyncSession = Depends(get_db_async),
        current_user: User = Depends(get_current_user),
    ):
        return await DashboardService(db).summary(current_user)
