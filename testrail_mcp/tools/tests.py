"""Test tools: the per-run instances of test cases."""

import logging
from typing import List, Optional, Union

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..errors import TestRailError
from .common import check_confirmation, error_response, ok, page_response

logger = logging.getLogger(__name__)

UPDATE_TESTS_CONFIRMATION = "UPDATE_MULTIPLE_TESTS"


def register_test_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register test tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_test",
        description = "Get a test (a case instance inside a run) by ID."
    )
    def get_test(
        test_id: int = Field(description="TestRail test ID"),
        with_data: Optional[str] = Field(default=None, description="Extra data to include, e.g. 'labels'")
    ) -> dict:
        try:
            return ok(test=client.tests.get_test(test_id, with_data=with_data))
        except TestRailError as e:
            return error_response(e, f"Failed to get test {test_id}")

    @mcp.tool(
        name = "testrail_get_tests",
        description = "List the tests of a run with optional status/label filters and pagination."
    )
    def get_tests(
        run_id: int = Field(description="TestRail run ID"),
        status_id: Optional[List[int]] = Field(default=None, description="Status IDs to include"),
        label_id: Optional[List[int]] = Field(default=None, description="Label IDs to include"),
        limit: Optional[int] = Field(default=None, description="Maximum number of tests"),
        offset: Optional[int] = Field(default=None, description="Number of tests to skip")
    ) -> dict:
        try:
            page = client.tests.get_tests(run_id, status_id=status_id, label_id=label_id, limit=limit, offset=offset)
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list tests of run {run_id}")

    @mcp.tool(
        name = "testrail_update_test",
        description = "Set the labels of a test."
    )
    def update_test(
        test_id: int = Field(description="TestRail test ID"),
        labels: List[Union[int, str]] = Field(description="Label IDs or titles")
    ) -> dict:
        try:
            return ok(test=client.tests.update_test(test_id, labels))
        except TestRailError as e:
            return error_response(e, f"Failed to update test {test_id}")

    @mcp.tool(
        name = "testrail_update_tests_batch",
        description = (
            "Set the same labels on several tests at once. "
            f"Requires confirmation='{UPDATE_TESTS_CONFIRMATION}'."
        )
    )
    def update_tests_batch(
        test_ids: List[int] = Field(description="IDs of the tests to update"),
        labels: List[Union[int, str]] = Field(description="Label IDs or titles"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{UPDATE_TESTS_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(confirmation, UPDATE_TESTS_CONFIRMATION, f"update {len(test_ids)} tests")
        if refusal:
            return refusal
        try:
            result = client.tests.update_tests(test_ids, labels)
            logger.info(f"testrail_update_tests_batch: Updated labels of {len(test_ids)} tests")
            return ok(tests=result)
        except TestRailError as e:
            return error_response(e, "Failed to update tests")
