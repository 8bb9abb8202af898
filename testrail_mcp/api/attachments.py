"""
Attachments: multipart uploads, listings and raw downloads.

Uploads require TestRail 5.7+ (results) or 6.3+ (plans, runs) and are capped
at 256MB by the server.
"""

import logging
import os
from typing import Any, Dict, Optional, Union

from ..errors import InputValidationError
from ..models import Page
from .base import EntityAPI, build_query, require_id, require_path_segment

logger = logging.getLogger(__name__)

# Multipart form field TestRail reads the file from
ATTACHMENT_FIELD = "attachment"


def require_attachment_id(value: Union[int, str]) -> str:
    """Attachment IDs are integers on older servers and UUID strings on TestRail Cloud."""
    if isinstance(value, bool):
        raise InputValidationError(f"Invalid attachment_id: expected integer or string, got bool ({value})")
    return require_path_segment(value, "attachment_id")


class AttachmentsAPI(EntityAPI):

    def _upload(self, path: str, file_path: str, filename: Optional[str] = None) -> Dict[str, Any]:
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")
        name = filename or os.path.basename(file_path)
        logger.info(f"Uploading attachment '{name}' to {path}")
        with open(file_path, "rb") as fh:
            return self._gateway.execute(
                path,
                method="POST",
                # requests sets the multipart boundary itself
                headers={"Content-Type": None},
                files={ATTACHMENT_FIELD: (name, fh)},
            )

    def add_attachment_to_case(self, case_id: int, file_path: str, filename: Optional[str] = None) -> Dict[str, Any]:
        return self._upload(f"add_attachment_to_case/{require_id(case_id, 'case_id')}", file_path, filename)

    def add_attachment_to_plan(self, plan_id: int, file_path: str, filename: Optional[str] = None) -> Dict[str, Any]:
        return self._upload(f"add_attachment_to_plan/{require_id(plan_id, 'plan_id')}", file_path, filename)

    def add_attachment_to_plan_entry(
        self, plan_id: int, entry_id: str, file_path: str, filename: Optional[str] = None
    ) -> Dict[str, Any]:
        path = f"add_attachment_to_plan_entry/{require_id(plan_id, 'plan_id')}/{require_path_segment(entry_id, 'entry_id')}"
        return self._upload(path, file_path, filename)

    def add_attachment_to_result(self, result_id: int, file_path: str, filename: Optional[str] = None) -> Dict[str, Any]:
        return self._upload(f"add_attachment_to_result/{require_id(result_id, 'result_id')}", file_path, filename)

    def add_attachment_to_run(self, run_id: int, file_path: str, filename: Optional[str] = None) -> Dict[str, Any]:
        return self._upload(f"add_attachment_to_run/{require_id(run_id, 'run_id')}", file_path, filename)

    def _list(self, path: str, limit: Optional[int], offset: Optional[int]) -> Page:
        return self._get_page(path, "attachments", build_query(limit=limit, offset=offset))

    def get_attachments_for_case(self, case_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        return self._list(f"get_attachments_for_case/{require_id(case_id, 'case_id')}", limit, offset)

    def get_attachments_for_plan(self, plan_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        return self._list(f"get_attachments_for_plan/{require_id(plan_id, 'plan_id')}", limit, offset)

    def get_attachments_for_plan_entry(
        self, plan_id: int, entry_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Page:
        path = f"get_attachments_for_plan_entry/{require_id(plan_id, 'plan_id')}/{require_path_segment(entry_id, 'entry_id')}"
        return self._list(path, limit, offset)

    def get_attachments_for_run(self, run_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        return self._list(f"get_attachments_for_run/{require_id(run_id, 'run_id')}", limit, offset)

    def get_attachments_for_result(self, result_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        return self._list(f"get_attachments_for_result/{require_id(result_id, 'result_id')}", limit, offset)

    def get_attachments_for_test(self, test_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        return self._list(f"get_attachments_for_test/{require_id(test_id, 'test_id')}", limit, offset)

    def get_attachment(self, attachment_id: Union[int, str]) -> bytes:
        """Download the attachment content as bytes."""
        return self._gateway.execute(
            f"get_attachment/{require_attachment_id(attachment_id)}",
            headers={"Content-Type": None},
            raw=True,
        )

    def delete_attachment(self, attachment_id: Union[int, str]) -> Any:
        return self._post(f"delete_attachment/{require_attachment_id(attachment_id)}")
