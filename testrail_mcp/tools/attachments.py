"""
Attachment tools.

Uploads read a file from the machine running this server, so ``file_path``
must be local to the server, not to the MCP client. Downloads are returned
base64-encoded.
"""

import base64
import logging
from typing import Callable, Optional, Union

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..errors import TestRailError
from .common import check_confirmation, error_response, file_error, ok, page_response

logger = logging.getLogger(__name__)

DELETE_ATTACHMENT_CONFIRMATION = "I_UNDERSTAND_THIS_IS_PERMANENT"


def _upload(details: str, upload: Callable[[], dict]) -> dict:
    try:
        attachment = upload()
        logger.info(f"{details}: done")
        return ok(attachment=attachment)
    except TestRailError as e:
        return error_response(e, f"Failed: {details}")
    except OSError as e:
        return file_error(e, f"Failed: {details}")


def register_attachment_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register attachment tools on the given MCP instance."""

    attachments = client.attachments

    @mcp.tool(
        name = "testrail_add_attachment_to_case",
        description = "Upload a local file as an attachment of a test case (max 256MB)."
    )
    def add_attachment_to_case(
        case_id: int = Field(description="TestRail case ID"),
        file_path: str = Field(description="Path of the file on the server machine"),
        filename: Optional[str] = Field(default=None, description="Name to store the file under (default: the file's name)")
    ) -> dict:
        return _upload(
            f"upload attachment to case {case_id}",
            lambda: attachments.add_attachment_to_case(case_id, file_path, filename),
        )

    @mcp.tool(
        name = "testrail_add_attachment_to_plan",
        description = "Upload a local file as an attachment of a test plan (max 256MB)."
    )
    def add_attachment_to_plan(
        plan_id: int = Field(description="TestRail plan ID"),
        file_path: str = Field(description="Path of the file on the server machine"),
        filename: Optional[str] = Field(default=None, description="Name to store the file under (default: the file's name)")
    ) -> dict:
        return _upload(
            f"upload attachment to plan {plan_id}",
            lambda: attachments.add_attachment_to_plan(plan_id, file_path, filename),
        )

    @mcp.tool(
        name = "testrail_add_attachment_to_plan_entry",
        description = "Upload a local file as an attachment of a test plan entry (max 256MB)."
    )
    def add_attachment_to_plan_entry(
        plan_id: int = Field(description="TestRail plan ID"),
        entry_id: str = Field(description="Plan entry ID (GUID)"),
        file_path: str = Field(description="Path of the file on the server machine"),
        filename: Optional[str] = Field(default=None, description="Name to store the file under (default: the file's name)")
    ) -> dict:
        return _upload(
            f"upload attachment to entry {entry_id} of plan {plan_id}",
            lambda: attachments.add_attachment_to_plan_entry(plan_id, entry_id, file_path, filename),
        )

    @mcp.tool(
        name = "testrail_add_attachment_to_result",
        description = "Upload a local file as an attachment of a test result (max 256MB)."
    )
    def add_attachment_to_result(
        result_id: int = Field(description="TestRail result ID"),
        file_path: str = Field(description="Path of the file on the server machine"),
        filename: Optional[str] = Field(default=None, description="Name to store the file under (default: the file's name)")
    ) -> dict:
        return _upload(
            f"upload attachment to result {result_id}",
            lambda: attachments.add_attachment_to_result(result_id, file_path, filename),
        )

    @mcp.tool(
        name = "testrail_add_attachment_to_run",
        description = "Upload a local file as an attachment of a test run (max 256MB)."
    )
    def add_attachment_to_run(
        run_id: int = Field(description="TestRail run ID"),
        file_path: str = Field(description="Path of the file on the server machine"),
        filename: Optional[str] = Field(default=None, description="Name to store the file under (default: the file's name)")
    ) -> dict:
        return _upload(
            f"upload attachment to run {run_id}",
            lambda: attachments.add_attachment_to_run(run_id, file_path, filename),
        )

    @mcp.tool(
        name = "testrail_get_attachments_for_case",
        description = "List the attachments of a test case."
    )
    def get_attachments_for_case(
        case_id: int = Field(description="TestRail case ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of attachments"),
        offset: Optional[int] = Field(default=None, description="Number of attachments to skip")
    ) -> dict:
        try:
            return page_response(attachments.get_attachments_for_case(case_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list attachments of case {case_id}")

    @mcp.tool(
        name = "testrail_get_attachments_for_plan",
        description = "List the attachments of a test plan."
    )
    def get_attachments_for_plan(
        plan_id: int = Field(description="TestRail plan ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of attachments"),
        offset: Optional[int] = Field(default=None, description="Number of attachments to skip")
    ) -> dict:
        try:
            return page_response(attachments.get_attachments_for_plan(plan_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list attachments of plan {plan_id}")

    @mcp.tool(
        name = "testrail_get_attachments_for_plan_entry",
        description = "List the attachments of a test plan entry."
    )
    def get_attachments_for_plan_entry(
        plan_id: int = Field(description="TestRail plan ID"),
        entry_id: str = Field(description="Plan entry ID (GUID)"),
        limit: Optional[int] = Field(default=None, description="Maximum number of attachments"),
        offset: Optional[int] = Field(default=None, description="Number of attachments to skip")
    ) -> dict:
        try:
            page = attachments.get_attachments_for_plan_entry(plan_id, entry_id, limit=limit, offset=offset)
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list attachments of entry {entry_id} of plan {plan_id}")

    @mcp.tool(
        name = "testrail_get_attachments_for_run",
        description = "List the attachments of a test run."
    )
    def get_attachments_for_run(
        run_id: int = Field(description="TestRail run ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of attachments"),
        offset: Optional[int] = Field(default=None, description="Number of attachments to skip")
    ) -> dict:
        try:
            return page_response(attachments.get_attachments_for_run(run_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list attachments of run {run_id}")

    @mcp.tool(
        name = "testrail_get_attachments_for_result",
        description = "List the attachments of a test result."
    )
    def get_attachments_for_result(
        result_id: int = Field(description="TestRail result ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of attachments"),
        offset: Optional[int] = Field(default=None, description="Number of attachments to skip")
    ) -> dict:
        try:
            return page_response(attachments.get_attachments_for_result(result_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list attachments of result {result_id}")

    @mcp.tool(
        name = "testrail_get_attachments_for_test",
        description = "List the attachments of a test (including those of its results)."
    )
    def get_attachments_for_test(
        test_id: int = Field(description="TestRail test ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of attachments"),
        offset: Optional[int] = Field(default=None, description="Number of attachments to skip")
    ) -> dict:
        try:
            return page_response(attachments.get_attachments_for_test(test_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to list attachments of test {test_id}")

    @mcp.tool(
        name = "testrail_download_attachment",
        description = "Download an attachment. The content is returned base64-encoded with its size in bytes."
    )
    def download_attachment(
        attachment_id: Union[int, str] = Field(description="Attachment ID (integer, or UUID on TestRail Cloud)")
    ) -> dict:
        try:
            content = attachments.get_attachment(attachment_id)
            return ok(
                attachment_id=attachment_id,
                size_bytes=len(content),
                content_base64=base64.b64encode(content).decode("ascii"),
            )
        except TestRailError as e:
            return error_response(e, f"Failed to download attachment {attachment_id}")

    @mcp.tool(
        name = "testrail_delete_attachment",
        description = (
            "Permanently delete an attachment. "
            f"Requires confirmation='{DELETE_ATTACHMENT_CONFIRMATION}'."
        )
    )
    def delete_attachment(
        attachment_id: Union[int, str] = Field(description="Attachment ID (integer, or UUID on TestRail Cloud)"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{DELETE_ATTACHMENT_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(
            confirmation, DELETE_ATTACHMENT_CONFIRMATION, f"delete attachment {attachment_id}"
        )
        if refusal:
            return refusal
        try:
            attachments.delete_attachment(attachment_id)
            logger.info(f"testrail_delete_attachment: Deleted attachment {attachment_id}")
            return ok(attachment_id=attachment_id, deleted=True)
        except TestRailError as e:
            return error_response(e, f"Failed to delete attachment {attachment_id}")
