"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from deposit_disposition.config import settings
from deposit_disposition.domain.policy import JurisdictionPolicy, policy_from_settings
from deposit_disposition.infrastructure.database.repositories import SqlAlchemyDispositionStore
from deposit_disposition.infrastructure.database.session import get_db
from deposit_disposition.services.disposition_service import DispositionService
from deposit_disposition.utils.date_utils import today


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_policy() -> JurisdictionPolicy:
    """Jurisdiction rules from settings"""
    return policy_from_settings(settings)


def get_clock():
    """Source of "today" for deadline math"""
    return today


def get_disposition_service(
    db: AsyncSession = Depends(get_db),
    policy: JurisdictionPolicy = Depends(get_policy),
    clock=Depends(get_clock),
) -> DispositionService:
    """Provide a disposition service bound to the request's database session"""
    return DispositionService(
        SqlAlchemyDispositionStore(db),
        policy=policy,
        clock=clock,
        strict=settings.strict_lifecycle,
    )
