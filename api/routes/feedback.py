"""In-app bug reports and feature requests"""

from fastapi import APIRouter, Depends
import logging

from api.dependencies import TenantContext, get_tenant
from domain.schemas.walker_schemas import FeedbackRequest, FeedbackResponse
from services.feedback_service import FeedbackService

router = APIRouter(tags=["Feedback"])
logger = logging.getLogger("offleash.api.feedback")


@router.post("/feedback", response_model=FeedbackResponse)
def submit_feedback(data: FeedbackRequest, tenant: TenantContext = Depends(get_tenant)):
    return FeedbackService.submit(tenant, data)
