"""
Test case tools, including batch creation/update, copy/move and bulk export.

Bulk and destructive operations require an explicit confirmation string so an
assistant cannot trigger them by accident:

- delete_case               I_UNDERSTAND_THIS_IS_IRREVERSIBLE_DELETE
- update_cases_batch        I_HAVE_REVIEWED_THE_CASE_IDS_TO_UPDATE
- add_cases_batch           I_HAVE_REVIEWED_AND_CONFIRM_CREATION
- copy_cases_to_section     I_UNDERSTAND_THIS_CREATES_DUPLICATES
- move_cases_to_section     I_UNDERSTAND_THIS_MOVES_CASES_PERMANENTLY
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastmcp import FastMCP
from pydantic import Field

from ..api import TestRailClient
from ..api.base import compact
from ..errors import TestRailError
from ..models import CaseDraft, CaseStep, dump_model
from .common import check_confirmation, error_response, ok, page_response

logger = logging.getLogger(__name__)

DELETE_CASE_CONFIRMATION = "I_UNDERSTAND_THIS_IS_IRREVERSIBLE_DELETE"
UPDATE_CASES_CONFIRMATION = "I_HAVE_REVIEWED_THE_CASE_IDS_TO_UPDATE"
ADD_CASES_CONFIRMATION = "I_HAVE_REVIEWED_AND_CONFIRM_CREATION"
COPY_CASES_CONFIRMATION = "I_UNDERSTAND_THIS_CREATES_DUPLICATES"
MOVE_CASES_CONFIRMATION = "I_UNDERSTAND_THIS_MOVES_CASES_PERMANENTLY"

EXPORT_FORMATS = ("json", "csv_summary")

# History entries attached to each case by bulk export
EXPORT_HISTORY_LIMIT = 10


def _case_fields(
    title: Optional[str] = None,
    template_id: Optional[int] = None,
    type_id: Optional[int] = None,
    priority_id: Optional[int] = None,
    estimate: Optional[str] = None,
    milestone_id: Optional[int] = None,
    refs: Optional[str] = None,
    labels: Optional[List[Union[int, str]]] = None,
    custom_preconds: Optional[str] = None,
    custom_steps: Optional[str] = None,
    custom_expected: Optional[str] = None,
    custom_steps_separated: Optional[List[CaseStep]] = None,
    custom_fields: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Request body for add_case/update_case; unset fields are left out."""
    fields = compact({
        "title": title,
        "template_id": template_id,
        "type_id": type_id,
        "priority_id": priority_id,
        "estimate": estimate,
        "milestone_id": milestone_id,
        "refs": refs,
        "labels": labels,
        "custom_preconds": custom_preconds,
        "custom_steps": custom_steps,
        "custom_expected": custom_expected,
    })
    if custom_steps_separated is not None:
        fields["custom_steps_separated"] = [dump_model(step) for step in custom_steps_separated]
    if custom_fields:
        fields.update(custom_fields)
    return fields


def _iso_timestamp(value: Any) -> Optional[str]:
    """Unix seconds -> ISO 8601 (UTC); None when the field is missing."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).isoformat()


def csv_summary(cases: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flat one-row-per-case summary used by the csv_summary export format."""
    return [
        {
            "id": case.get("id"),
            "title": case.get("title"),
            "section_id": case.get("section_id"),
            "priority": case.get("priority_id"),
            "type": case.get("type_id"),
            "created_on": _iso_timestamp(case.get("created_on")),
            "updated_on": _iso_timestamp(case.get("updated_on")),
        }
        for case in cases
    ]


def register_case_tools(mcp: FastMCP, client: TestRailClient) -> None:
    """Register test case tools on the given MCP instance."""

    @mcp.tool(
        name = "testrail_get_case",
        description = "Get a test case by ID, including its steps and custom fields."
    )
    def get_case(
        case_id: int = Field(description="TestRail case ID (without the 'C' prefix)")
    ) -> dict:
        try:
            return ok(case=client.cases.get_case(case_id))
        except TestRailError as e:
            return error_response(e, f"Failed to get case {case_id}")

    @mcp.tool(
        name = "testrail_get_cases",
        description = (
            "List test cases of a project with optional suite/section/attribute filters and pagination. "
            "Date filters are Unix timestamps."
        )
    )
    def get_cases(
        project_id: int = Field(description="TestRail project ID"),
        suite_id: Optional[int] = Field(default=None, description="Suite ID (required for multi-suite projects)"),
        section_id: Optional[int] = Field(default=None, description="Only cases in this section"),
        filter: Optional[str] = Field(default=None, description="Only cases whose title contains this text"),
        priority_id: Optional[List[int]] = Field(default=None, description="Priority IDs to include"),
        type_id: Optional[List[int]] = Field(default=None, description="Case type IDs to include"),
        template_id: Optional[List[int]] = Field(default=None, description="Template IDs to include"),
        milestone_id: Optional[List[int]] = Field(default=None, description="Milestone IDs to include"),
        label_id: Optional[List[int]] = Field(default=None, description="Label IDs to include"),
        created_by: Optional[List[int]] = Field(default=None, description="Creator user IDs"),
        updated_by: Optional[List[int]] = Field(default=None, description="Last editor user IDs"),
        created_after: Optional[int] = Field(default=None, description="Created after (Unix timestamp)"),
        created_before: Optional[int] = Field(default=None, description="Created before (Unix timestamp)"),
        updated_after: Optional[int] = Field(default=None, description="Updated after (Unix timestamp)"),
        updated_before: Optional[int] = Field(default=None, description="Updated before (Unix timestamp)"),
        refs: Optional[str] = Field(default=None, description="Reference ID filter, e.g. 'TR-1,TR-2'"),
        limit: Optional[int] = Field(default=None, description="Maximum number of cases to return (TestRail default: 250)"),
        offset: Optional[int] = Field(default=None, description="Number of cases to skip")
    ) -> dict:
        try:
            page = client.cases.get_cases(
                project_id,
                suite_id=suite_id,
                section_id=section_id,
                filter=filter,
                priority_id=priority_id,
                type_id=type_id,
                template_id=template_id,
                milestone_id=milestone_id,
                label_id=label_id,
                created_by=created_by,
                updated_by=updated_by,
                created_after=created_after,
                created_before=created_before,
                updated_after=updated_after,
                updated_before=updated_before,
                refs=refs,
                limit=limit,
                offset=offset,
            )
            return page_response(page)
        except TestRailError as e:
            return error_response(e, f"Failed to list cases of project {project_id}")

    @mcp.tool(
        name = "testrail_add_case",
        description = "Create a test case in a section. Custom fields can be passed through custom_fields."
    )
    def add_case(
        section_id: int = Field(description="Section ID the case is created in"),
        title: str = Field(description="Title of the test case"),
        template_id: Optional[int] = Field(default=None, description="Template (field layout) ID"),
        type_id: Optional[int] = Field(default=None, description="Case type ID"),
        priority_id: Optional[int] = Field(default=None, description="Priority ID"),
        estimate: Optional[str] = Field(default=None, description="Estimate, e.g. '30s' or '1m 45s'"),
        milestone_id: Optional[int] = Field(default=None, description="Milestone ID"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references/requirements"),
        labels: Optional[List[Union[int, str]]] = Field(default=None, description="Label IDs or titles"),
        custom_preconds: Optional[str] = Field(default=None, description="Preconditions"),
        custom_steps: Optional[str] = Field(default=None, description="Steps as plain text"),
        custom_expected: Optional[str] = Field(default=None, description="Expected result"),
        custom_steps_separated: Optional[List[CaseStep]] = Field(default=None, description="Structured steps"),
        custom_fields: Optional[Dict[str, Any]] = Field(default=None, description="Additional custom_* fields, sent as-is")
    ) -> dict:
        try:
            fields = _case_fields(
                title=title,
                template_id=template_id,
                type_id=type_id,
                priority_id=priority_id,
                estimate=estimate,
                milestone_id=milestone_id,
                refs=refs,
                labels=labels,
                custom_preconds=custom_preconds,
                custom_steps=custom_steps,
                custom_expected=custom_expected,
                custom_steps_separated=custom_steps_separated,
                custom_fields=custom_fields,
            )
            case = client.cases.add_case(section_id, fields)
            logger.info(f"testrail_add_case: Created case '{title}' in section {section_id}")
            return ok(case=case)
        except TestRailError as e:
            return error_response(e, f"Failed to create case in section {section_id}")

    @mcp.tool(
        name = "testrail_update_case",
        description = "Update fields of an existing test case. Only the fields given are changed."
    )
    def update_case(
        case_id: int = Field(description="TestRail case ID"),
        title: Optional[str] = Field(default=None, description="New title"),
        section_id: Optional[int] = Field(default=None, description="Move the case to this section (same suite)"),
        template_id: Optional[int] = Field(default=None, description="Template (field layout) ID"),
        type_id: Optional[int] = Field(default=None, description="Case type ID"),
        priority_id: Optional[int] = Field(default=None, description="Priority ID"),
        estimate: Optional[str] = Field(default=None, description="Estimate, e.g. '30s' or '1m 45s'"),
        milestone_id: Optional[int] = Field(default=None, description="Milestone ID"),
        refs: Optional[str] = Field(default=None, description="Comma-separated references/requirements"),
        labels: Optional[List[Union[int, str]]] = Field(default=None, description="Label IDs or titles"),
        custom_preconds: Optional[str] = Field(default=None, description="Preconditions"),
        custom_steps: Optional[str] = Field(default=None, description="Steps as plain text"),
        custom_expected: Optional[str] = Field(default=None, description="Expected result"),
        custom_steps_separated: Optional[List[CaseStep]] = Field(default=None, description="Structured steps (replaces existing)"),
        custom_fields: Optional[Dict[str, Any]] = Field(default=None, description="Additional custom_* fields, sent as-is")
    ) -> dict:
        try:
            fields = _case_fields(
                title=title,
                template_id=template_id,
                type_id=type_id,
                priority_id=priority_id,
                estimate=estimate,
                milestone_id=milestone_id,
                refs=refs,
                labels=labels,
                custom_preconds=custom_preconds,
                custom_steps=custom_steps,
                custom_expected=custom_expected,
                custom_steps_separated=custom_steps_separated,
                custom_fields=custom_fields,
            )
            if section_id is not None:
                fields["section_id"] = section_id
            return ok(case=client.cases.update_case(case_id, fields))
        except TestRailError as e:
            return error_response(e, f"Failed to update case {case_id}")

    @mcp.tool(
        name = "testrail_delete_case",
        description = (
            "Permanently delete a test case and all its results. IRREVERSIBLE. "
            f"Requires confirmation='{DELETE_CASE_CONFIRMATION}'."
        )
    )
    def delete_case(
        case_id: int = Field(description="TestRail case ID"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{DELETE_CASE_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(confirmation, DELETE_CASE_CONFIRMATION, f"delete case {case_id}")
        if refusal:
            return refusal
        try:
            client.cases.delete_case(case_id)
            logger.info(f"testrail_delete_case: Deleted case {case_id}")
            return ok(case_id=case_id, deleted=True)
        except TestRailError as e:
            return error_response(e, f"Failed to delete case {case_id}")

    @mcp.tool(
        name = "testrail_get_case_history",
        description = "Get the change history of a test case."
    )
    def get_case_history(
        case_id: int = Field(description="TestRail case ID"),
        limit: Optional[int] = Field(default=None, description="Maximum number of history entries"),
        offset: Optional[int] = Field(default=None, description="Number of entries to skip")
    ) -> dict:
        try:
            return page_response(client.cases.get_history_for_case(case_id, limit=limit, offset=offset))
        except TestRailError as e:
            return error_response(e, f"Failed to get history of case {case_id}")

    @mcp.tool(
        name = "testrail_update_cases_batch",
        description = (
            "Apply the same field values to several cases of one suite. "
            f"Requires confirmation='{UPDATE_CASES_CONFIRMATION}'."
        )
    )
    def update_cases_batch(
        suite_id: int = Field(description="Suite containing the cases"),
        case_ids: List[int] = Field(description="IDs of the cases to update"),
        fields: Dict[str, Any] = Field(description="Field values to set on every case, e.g. {'priority_id': 3}"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{UPDATE_CASES_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(confirmation, UPDATE_CASES_CONFIRMATION, f"update {len(case_ids)} cases")
        if refusal:
            return refusal
        try:
            result = client.cases.update_cases(suite_id, case_ids, fields)
            logger.info(f"testrail_update_cases_batch: Updated {len(case_ids)} cases in suite {suite_id}")
            return ok(updated_case_ids=case_ids, result=result)
        except TestRailError as e:
            return error_response(e, f"Failed to update cases in suite {suite_id}")

    @mcp.tool(
        name = "testrail_copy_cases_to_section",
        description = (
            "Copy cases into another section; the originals stay where they are. "
            f"Requires confirmation='{COPY_CASES_CONFIRMATION}'."
        )
    )
    def copy_cases_to_section(
        section_id: int = Field(description="Target section ID"),
        case_ids: List[int] = Field(description="IDs of the cases to copy"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{COPY_CASES_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(confirmation, COPY_CASES_CONFIRMATION, f"copy {len(case_ids)} cases")
        if refusal:
            return refusal
        try:
            result = client.cases.copy_cases_to_section(section_id, case_ids)
            logger.info(f"testrail_copy_cases_to_section: Copied {len(case_ids)} cases to section {section_id}")
            return ok(section_id=section_id, copied_case_ids=case_ids, result=result)
        except TestRailError as e:
            return error_response(e, f"Failed to copy cases to section {section_id}")

    @mcp.tool(
        name = "testrail_move_cases_to_section",
        description = (
            "Move cases to another section (and suite). "
            f"Requires confirmation='{MOVE_CASES_CONFIRMATION}'."
        )
    )
    def move_cases_to_section(
        section_id: int = Field(description="Target section ID"),
        suite_id: int = Field(description="Suite of the target section"),
        case_ids: List[int] = Field(description="IDs of the cases to move"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{MOVE_CASES_CONFIRMATION}'")
    ) -> dict:
        refusal = check_confirmation(confirmation, MOVE_CASES_CONFIRMATION, f"move {len(case_ids)} cases")
        if refusal:
            return refusal
        try:
            result = client.cases.move_cases_to_section(section_id, suite_id, case_ids)
            logger.info(f"testrail_move_cases_to_section: Moved {len(case_ids)} cases to section {section_id}")
            return ok(section_id=section_id, moved_case_ids=case_ids, result=result)
        except TestRailError as e:
            return error_response(e, f"Failed to move cases to section {section_id}")

    @mcp.tool(
        name = "testrail_add_cases_batch",
        description = (
            "Create several test cases in one section. Optionally create only the 1-based "
            "selected_indexes. Failures of single cases are reported, not fatal. "
            f"Requires confirmation='{ADD_CASES_CONFIRMATION}'."
        )
    )
    def add_cases_batch(
        section_id: int = Field(description="Section the cases are created in"),
        test_cases: List[CaseDraft] = Field(description="Test cases to create"),
        selected_indexes: Optional[List[int]] = Field(default=None, description="1-based indexes of test_cases to create (default: all)"),
        confirmation: Optional[str] = Field(default=None, description=f"Must be exactly '{ADD_CASES_CONFIRMATION}'")
    ) -> dict:
        """
        Create test cases one by one, collecting a per-case outcome.

        Returns:
            dict: {
                'status': 'OK',
                'created': int,
                'failed': int,
                'selection': 'all' | [indexes],
                'results': [
                    {'index': 1, 'title': str, 'status': 'created', 'case_id': int},
                    {'index': 2, 'title': str, 'status': 'failed', 'error': str},
                    ...
                ]
            }
        """
        refusal = check_confirmation(confirmation, ADD_CASES_CONFIRMATION, f"create {len(test_cases)} cases")
        if refusal:
            return refusal

        if selected_indexes:
            indexes = list(selected_indexes)
        else:
            indexes = list(range(1, len(test_cases) + 1))

        results = []
        created = 0
        failed = 0
        for index in indexes:
            if index < 1 or index > len(test_cases):
                results.append({"index": index, "status": "failed", "error": f"Index {index} is out of range (1-{len(test_cases)})"})
                failed += 1
                continue

            draft = test_cases[index - 1]
            try:
                case = client.cases.add_case(section_id, dump_model(draft))
            except TestRailError as e:
                logger.error(f"testrail_add_cases_batch: Case #{index} '{draft.title}' failed: {e}")
                results.append({"index": index, "title": draft.title, "status": "failed", "error": str(e)})
                failed += 1
                continue

            if isinstance(case, dict) and case.get("id"):
                results.append({"index": index, "title": draft.title, "status": "created", "case_id": case["id"]})
                created += 1
            else:
                results.append({"index": index, "title": draft.title, "status": "failed", "error": "No case returned by TestRail"})
                failed += 1

        logger.info(f"testrail_add_cases_batch: Created {created}, failed {failed} in section {section_id}")
        return ok(
            section_id=section_id,
            created=created,
            failed=failed,
            selection=list(selected_indexes) if selected_indexes else "all",
            results=results,
        )

    @mcp.tool(
        name = "testrail_bulk_export_cases",
        description = (
            "Export one page of test cases for backup or migration, optionally enriched with full details "
            "and recent change history. Formats: json, csv_summary."
        )
    )
    def bulk_export_cases(
        project_id: int = Field(description="Project to export from"),
        suite_id: Optional[int] = Field(default=None, description="Suite to export (required for multi-suite projects)"),
        section_id: Optional[int] = Field(default=None, description="Only export this section"),
        include_steps: bool = Field(default=True, description="Fetch each case in full, including steps"),
        include_history: bool = Field(default=False, description="Attach the last 10 history entries of each case"),
        format: str = Field(default="json", description="Export format: 'json' or 'csv_summary'"),
        limit: Optional[int] = Field(default=None, description="Maximum number of cases to export"),
        offset: Optional[int] = Field(default=None, description="Number of cases to skip")
    ) -> dict:
        """
        Export cases with optional per-case enrichment.

        Enrichment failures for a single case are logged and listed under
        ``enrichment_errors``; the case is still exported with its list data.
        """
        if format not in EXPORT_FORMATS:
            return {
                "status": "failed",
                "error": f"Unsupported export format '{format}'; expected one of {', '.join(EXPORT_FORMATS)}",
                "error_type": "validation",
                "details": "Failed to export test cases",
            }

        try:
            page = client.cases.get_cases(project_id, suite_id=suite_id, section_id=section_id, limit=limit, offset=offset)
        except TestRailError as e:
            return error_response(e, "Failed to export test cases")

        metadata = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "project_id": project_id,
            "suite_id": suite_id,
            "section_id": section_id,
            "include_steps": include_steps,
            "include_history": include_history,
            "format": format,
        }

        if not page.items:
            metadata["total_cases"] = 0
            return ok(message="No test cases found for the specified criteria", export_metadata=metadata, test_cases=[])

        cases = []
        enrichment_errors = []
        for listed in page.items:
            case = dict(listed)
            case_id = case.get("id")
            if include_steps and case_id:
                try:
                    details = client.cases.get_case(case_id)
                except TestRailError as e:
                    logger.warning(f"testrail_bulk_export_cases: Could not fetch details for case {case_id}: {e}")
                    enrichment_errors.append({"case_id": case_id, "step": "details", "error": str(e)})
                else:
                    if isinstance(details, dict):
                        case.update(details)
                    else:
                        logger.warning(f"testrail_bulk_export_cases: No details returned for case {case_id}")
                        enrichment_errors.append({"case_id": case_id, "step": "details", "error": "No case details returned by TestRail"})
            if include_history and case_id:
                try:
                    history = client.cases.get_history_for_case(case_id, limit=EXPORT_HISTORY_LIMIT)
                    case["change_history"] = history.items
                except TestRailError as e:
                    logger.warning(f"testrail_bulk_export_cases: Could not fetch history for case {case_id}: {e}")
                    enrichment_errors.append({"case_id": case_id, "step": "history", "error": str(e)})
            cases.append(case)

        metadata["total_cases"] = len(cases)
        response = ok(
            export_metadata=metadata,
            test_cases=cases,
            offset=page.offset,
            limit=page.limit,
            size=page.size,
            _links=page.links,
            has_more=page.has_more,
        )
        if enrichment_errors:
            response["enrichment_errors"] = enrichment_errors
        if format == "csv_summary":
            response["csv_summary"] = csv_summary(cases)
        logger.info(f"testrail_bulk_export_cases: Exported {len(cases)} cases from project {project_id}")
        return response
