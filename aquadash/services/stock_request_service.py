# aquadash/services/stock_request_service.py
"""
Site material requisitions (stock requests).

Endpoints:
- POST   /stock-requests
- GET    /stock-requests                      {"data": {"requests": [...]}}
- GET    /stock-requests/{id}
- PATCH  /stock-requests/{id}/modify-approve
- PATCH  /stock-requests/{id}/reject          {"notes"}
- POST   /stock-requests/issue-materials
- POST   /stock-requests/receive-materials
- DELETE /stock-requests/{id}
- POST   /stock-requests/{id}/attachments     multipart: attachmentImg + role, userId, description
- POST   /stock-requests/{id}/comments        {userId, role, description, uploadedAt}
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from aquadash.errors import FormValidationError
from aquadash.schemas.common import ValidationResult
from aquadash.schemas.stock_requests import (
    ActorRole,
    Attachment,
    Comment,
    CommentIn,
    IssueMaterials,
    ModifyAndApprove,
    ReceiveMaterials,
    StockRequest,
)
from aquadash.services.base import CrudService, dump, form_fields
from aquadash.settings import settings

log = logging.getLogger(__name__)


def validate_attachment(
    filename: str,
    content_type: Optional[str],
    size: int,
) -> ValidationResult:
    """Up to ATTACHMENT_MAX_BYTES, PDF / PNG / JPEG only."""
    result = ValidationResult()
    if not filename:
        result.errors.append("Please select a file")
        return result
    if size > settings.ATTACHMENT_MAX_BYTES:
        limit_mb = settings.ATTACHMENT_MAX_BYTES // (1024 * 1024)
        result.errors.append(f"File size must be less than {limit_mb}MB")
    if content_type not in settings.ATTACHMENT_CONTENT_TYPES:
        result.errors.append("Only PDF, PNG, and JPEG files are allowed")
    return result


def validate_comment(description: str) -> ValidationResult:
    result = ValidationResult()
    if not (description or "").strip():
        result.errors.append("Comment cannot be empty")
    return result


class StockRequestService(CrudService[StockRequest]):
    path = "/stock-requests"
    model = StockRequest
    noun = "request"
    plural = "requests"
    update_method = "PATCH"

    def list_all(self) -> list[StockRequest]:
        body = self.api.get(self.path, fallback="Failed to fetch requests")
        # paginated envelope
        if isinstance(body, dict):
            body = (body.get("data") or {}).get("requests", [])
        return self._many(body)

    def modify_and_approve(self, id: str, data: ModifyAndApprove) -> StockRequest:
        body = self.api.patch(f"{self.path}/{id}/modify-approve", dump(data), fallback="Failed to update request")
        return self._one(_unwrap(body))

    def reject(self, id: str, notes: Optional[str] = None) -> StockRequest:
        body = self.api.patch(f"{self.path}/{id}/reject", {"notes": notes}, fallback="Failed to reject request")
        return self._one(_unwrap(body))

    def issue_materials(self, data: IssueMaterials) -> Any:
        return self.api.post(f"{self.path}/issue-materials", dump(data), fallback="Failed to issue materials")

    def receive_materials(self, data: ReceiveMaterials) -> Any:
        return self.api.post(f"{self.path}/receive-materials", dump(data), fallback="Failed to receive materials")

    # ── attachments & comments ──

    def upload_attachment(
        self,
        id: str,
        *,
        filename: str,
        content: bytes,
        content_type: Optional[str],
        role: ActorRole,
        user_id: str,
        description: Optional[str] = None,
    ) -> list[Attachment]:
        check = validate_attachment(filename, content_type, len(content))
        if not check.is_valid:
            raise FormValidationError(check.errors)

        fields = form_fields({
            "role": role.value,
            "userId": user_id,
            "description": description or None,
        })
        body = self.api.post(
            f"{self.path}/{id}/attachments",
            data=fields,
            files={"attachmentImg": (filename, content, content_type)},
            fallback="Failed to upload attachment",
        )
        log.info("attachment %s uploaded to request %s", filename, id)
        return [Attachment.model_validate(a) for a in _as_list(body)]

    def add_comment(self, id: str, *, user_id: str, role: ActorRole, description: str) -> list[Comment]:
        check = validate_comment(description)
        if not check.is_valid:
            raise FormValidationError(check.errors)

        payload = CommentIn(
            userId=user_id,
            role=role,
            description=description.strip(),
            uploadedAt=datetime.now(timezone.utc).isoformat(),
        )
        body = self.api.post(f"{self.path}/{id}/comments", dump(payload), fallback="Failed to add comment")
        return [Comment.model_validate(c) for c in _as_list(body)]


def _unwrap(body: Any) -> Any:
    """{"success": true, "data": {...}} → {...}"""
    if isinstance(body, dict) and "data" in body and "id" not in body:
        return body["data"]
    return body


def _as_list(body: Any) -> list:
    if body is None:
        return []
    if isinstance(body, list):
        return body
    return [body]
