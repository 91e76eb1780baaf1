from typing import List

from fastapi import APIRouter, Depends

from edubridge.database.connection import mongo_db_dependency
from edubridge.schemas.analytics import DashboardSummary, RecentActivity, UpcomingSession
from edubridge.schemas.common import NamedValue
from edubridge.services.analytics_service import AnalyticsService
from edubridge.utils.dependencies import require_staff


router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(require_staff)])


def get_analytics_service(db=Depends(mongo_db_dependency)) -> AnalyticsService:
    return AnalyticsService(db)


@router.get("/summary", response_model=DashboardSummary)
async def summary(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.dashboard_summary()


@router.get("/enrollment-trends", response_model=List[NamedValue])
async def enrollment_trends(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.enrollment_trends()


@router.get("/program-popularity", response_model=List[NamedValue])
async def program_popularity(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.program_popularity()


@router.get("/enrollment-status", response_model=List[NamedValue])
async def enrollment_status(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.enrollment_status_distribution()


@router.get("/program-status", response_model=List[NamedValue])
async def program_status(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.program_status_distribution()


@router.get("/user-roles", response_model=List[NamedValue])
async def user_roles(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.user_role_distribution()


@router.get("/recent-activity", response_model=RecentActivity)
async def recent_activity(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.recent_activity()


@router.get("/completion-rates", response_model=List[NamedValue])
async def completion_rates(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.completion_rate_by_program()


@router.get("/upcoming-sessions", response_model=List[UpcomingSession])
async def upcoming_sessions(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.upcoming_sessions()
