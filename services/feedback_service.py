import logging

from adapters import github_adapter
from api.dependencies import TenantContext
from domain.enums import FeedbackType
from domain.schemas.walker_schemas import FeedbackRequest, FeedbackResponse

logger = logging.getLogger("offleash.feedback")

TITLE_PREFIX = {FeedbackType.BUG: "[Bug]", FeedbackType.FEATURE: "[Feature Request]"}
TYPE_LABEL = {FeedbackType.BUG: "bug", FeedbackType.FEATURE: "enhancement"}


def issue_body(data: FeedbackRequest, tenant: TenantContext) -> str:
    return (
        f"{data.description}\n\n"
        "---\n"
        f"*Submitted via OFFLEASH app feedback form by user {tenant.user_id} "
        f"(organization {tenant.org_id}, role {tenant.role.value})*"
    )


class FeedbackService:
    """Bug reports and feature requests, filed as GitHub issues when a token is configured"""

    @staticmethod
    def submit(tenant: TenantContext, data: FeedbackRequest) -> FeedbackResponse:
        if not github_adapter.is_available():
            logger.info(
                f"feedback_received type={data.feedback_type.value} user_id={tenant.user_id} issue=none"
            )
            return FeedbackResponse(success=True, message="Feedback received. Thank you!")

        issue = github_adapter.create_issue(
            title=f"{TITLE_PREFIX[data.feedback_type]} {data.title}",
            body=issue_body(data, tenant),
            labels=[TYPE_LABEL[data.feedback_type], "user-feedback"],
        )
        if not issue or "number" not in issue:
            return FeedbackResponse(
                success=True, message="Feedback received, but could not retrieve issue details."
            )

        logger.info(f"feedback_filed type={data.feedback_type.value} issue={issue['number']}")
        return FeedbackResponse(
            success=True,
            issue_url=issue.get("html_url"),
            issue_number=issue["number"],
            message="Feedback submitted successfully!",
        )
