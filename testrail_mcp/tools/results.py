"""
Result tools: reading and recording test execution outcomes.

System status IDs: 1=Passed, 2=Blocked, 3=Untested (not allowed when adding
results), 4=Retest, 5=Failed. Custom statuses start at 6.
"""

import logging
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..errors import TestRailError
from ..models import CaseResultEntry, ResultFields, StepResult, TestResultEntry, dump_model
from .common import error_response, ok, page_response

logger = logging.getLogger(__name__)


def _result_fields(
    status_id: Optional[int],
    comment: Optional[str],
    version: Optional[str],
    elapsed: Optional[str],
    defects: Optional[str],
    assignedto_id: Optional[int],
    custom_step_results: Optional[List[StepResult]],
    custom_fields: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    fields = ResultFields(
        status_id=status_id,
        comment=comment,
        version=version,
        elapsed=elapsed,
        defects=defects,
        assignedto_id=assignedto_id,
        custom_step_results=custom_step_results,
    )
    payload = dump_model(fields)
    if custom_fields:
        payload.update(custom_fields)
    return payload


def register_result_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register result tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_results",
        description = "List results of a single test (newest first) with optional status/defect filters."
    )
    def get_results(
        test_id: int = Field(description="TestRail test ID (a case instance inside a run)"),
        status_id: Optional[List[int]] = Field(default=None, description="Status IDs to include"),
        defects_filter: Optional[str] = Field(default=None, description="Only results referencing this defect ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of results"),
        offset: Optional[int] = Field(default=None, description="Number of results to skip")
    ) -> dict:
        try:
            page = client.results.get_results(
                test_id, status_id=status_id, defects_filter=defects_filter, limit=limit, offset=offset
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to get results of test {test_id}")

    @mcp.tool(
        name = "testrail_get_results_for_case",
        description = "List results of a case within a run."
    )
    def get_results_for_case(
        run_id: int = Field(description="TestRail run ID"),
        case_id: int = Field(description="TestRail case ID"),
        status_id: Optional[List[int]] = Field(default=None, description="Status IDs to include"),
        defects_filter: Optional[str] = Field(default=None, description="Only results referencing this defect ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of results"),
        offset: Optional[int] = Field(default=None, description="Number of results to skip")
    ) -> dict:
        try:
            page = client.results.get_results_for_case(
                run_id, case_id, status_id=status_id, defects_filter=defects_filter, limit=limit, offset=offset
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to get results of case {case_id} in run {run_id}")

    @mcp.tool(
        name = "testrail_get_results_for_run",
        description = "List all results of a run with optional filters and pagination."
    )
    def get_results_for_run(
        run_id: int = Field(description="TestRail run ID"),
        status_id: Optional[List[int]] = Field(default=None, description="Status IDs to include"),
        defects_filter: Optional[str] = Field(default=None, description="Only results referencing this defect ID"),
        created_after: Optional[int] = Field(default=None, description="Created after (Unix timestamp)"),
        created_before: Optional[int] = Field(default=None, description="Created before (Unix timestamp)"),
        created_by: Optional[List[int]] = Field(default=None, description="Creator user IDs"),
        limit: Optional[int] = Field(default=None, description="Maximum number of results"),
        offset: Optional[int] = Field(default=None, description="Number of results to skip")
    ) -> dict:
        try:
            page = client.results.get_results_for_run(
                run_id,
                status_id=status_id,
                defects_filter=defects_filter,
                created_after=created_after,
                created_before=created_before,
                created_by=created_by,
                limit=limit,
                offset=offset,
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to get results of run {run_id}")

    @mcp.tool(
        name = "testrail_add_result",
        description = "Record a result for a test. status_id: 1=Passed, 2=Blocked, 4=Retest, 5=Failed."
    )
    def add_result(
        test_id: int = Field(description="TestRail test ID"),
        status_id: Optional[int] = Field(default=None, description="Result status ID"),
        comment: Optional[str] = Field(default=None, description="Comment / description of the result"),
        version: Optional[str] = Field(default=None, description="Version or build tested"),
        elapsed: Optional[str] = Field(default=None, description="Time spent, e.g. '30s' or '1m 45s'"),
        defects: Optional[str] = Field(default=None, description="Comma-separated defect IDs"),
        assignedto_id: Optional[int] = Field(default=None, description="User the test is assigned to"),
        custom_step_results: Optional[List[StepResult]] = Field(default=None, description="Per-step results"),
        custom_fields: Optional[Dict[str, Any]] = Field(default=None, description="Additional custom_* result fields")
    ) -> dict:
        try:
            payload = _result_fields(
                status_id, comment, version, elapsed, defects, assignedto_id, custom_step_results, custom_fields
            )
            result = client.results.add_result(test_id, payload)
            logger.info(f"testrail_add_result: Recorded status {status_id} for test {test_id}")
            return ok(result=result)
        except TestRailError as e:
            return error_response(e, f"Failed to add result to test {test_id}")

    @mcp.tool(
        name = "testrail_add_result_for_case",
        description = "Record a result for a case within a run."
    )
    def add_result_for_case(
        run_id: int = Field(description="TestRail run ID"),
        case_id: int = Field(description="TestRail case ID"),
        status_id: Optional[int] = Field(default=None, description="Result status ID"),
        comment: Optional[str] = Field(default=None, description="Comment / description of the result"),
        version: Optional[str] = Field(default=None, description="Version or build tested"),
        elapsed: Optional[str] = Field(default=None, description="Time spent, e.g. '30s' or '1m 45s'"),
        defects: Optional[str] = Field(default=None, description="Comma-separated defect IDs"),
        assignedto_id: Optional[int] = Field(default=None, description="User the test is assigned to"),
        custom_step_results: Optional[List[StepResult]] = Field(default=None, description="Per-step results"),
        custom_fields: Optional[Dict[str, Any]] = Field(default=None, description="Additional custom_* result fields")
    ) -> dict:
        try:
            payload = _result_fields(
                status_id, comment, version, elapsed, defects, assignedto_id, custom_step_results, custom_fields
            )
            result = client.results.add_result_for_case(run_id, case_id, payload)
            logger.info(f"testrail_add_result_for_case: Recorded status {status_id} for case {case_id} in run {run_id}")
            return ok(result=result)
        except TestRailError as e:
            return error_response(e, f"Failed to add result for case {case_id} in run {run_id}")

    @mcp.tool(
        name = "testrail_add_results",
        description = "Record several results in a run at once, each addressed by test_id."
    )
    def add_results(
        run_id: int = Field(description="TestRail run ID"),
        results: List[TestResultEntry] = Field(description="Results to record")
    ) -> dict:
        try:
            recorded = client.results.add_results(run_id, [dump_model(entry) for entry in results])
            logger.info(f"testrail_add_results: Recorded {len(results)} results in run {run_id}")
            return ok(results=recorded)
        except TestRailError as e:
            return error_response(e, f"Failed to add results to run {run_id}")

    @mcp.tool(
        name = "testrail_add_results_for_cases",
        description = "Record several results in a run at once, each addressed by case_id."
    )
    def add_results_for_cases(
        run_id: int = Field(description="TestRail run ID"),
        results: List[CaseResultEntry] = Field(description="Results to record")
    ) -> dict:
        try:
            recorded = client.results.add_results_for_cases(run_id, [dump_model(entry) for entry in results])
            logger.info(f"testrail_add_results_for_cases: Recorded {len(results)} results in run {run_id}")
            return ok(results=recorded)
        except TestRailError as e:
            return error_response(e, f"Failed to add results to run {run_id}")
