"""Test cases, their history and bulk case operations."""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import InputValidationError
from ..models import Page
from .base import EntityAPI, build_query, require_id

DateLike = Union[date, int]


class CasesAPI(EntityAPI):

    def get_case(self, case_id: int) -> Dict[str, Any]:
        return self._get(f"get_case/{require_id(case_id, 'case_id')}")

    def get_cases(
        self,
        project_id: int,
        suite_id: Optional[int] = None,
        section_id: Optional[int] = None,
        filter: Optional[str] = None,
        priority_id: Optional[Sequence[int]] = None,
        type_id: Optional[Sequence[int]] = None,
        template_id: Optional[Sequence[int]] = None,
        milestone_id: Optional[Sequence[int]] = None,
        label_id: Optional[Sequence[int]] = None,
        created_by: Optional[Sequence[int]] = None,
        updated_by: Optional[Sequence[int]] = None,
        created_after: Optional[DateLike] = None,
        created_before: Optional[DateLike] = None,
        updated_after: Optional[DateLike] = None,
        updated_before: Optional[DateLike] = None,
        refs: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        """
        List cases of a project, optionally narrowed by suite, section and filters.

        ``filter`` is TestRail's title substring search; ID filters accept
        several values (sent comma-separated); date filters accept dates or
        Unix timestamps.
        """
        params = build_query(
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
        return self._get_page(f"get_cases/{require_id(project_id, 'project_id')}", "cases", params)

    def add_case(self, section_id: int, case: Dict[str, Any]) -> Dict[str, Any]:
        if not case.get("title"):
            raise InputValidationError("A test case needs a non-empty title")
        return self._post(f"add_case/{require_id(section_id, 'section_id')}", case)

    def update_case(self, case_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"update_case/{require_id(case_id, 'case_id')}", fields)

    def delete_case(self, case_id: int) -> Any:
        return self._post(f"delete_case/{require_id(case_id, 'case_id')}")

    def get_history_for_case(self, case_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        params = build_query(limit=limit, offset=offset)
        return self._get_page(f"get_history_for_case/{require_id(case_id, 'case_id')}", "history", params)

    def update_cases(self, suite_id: int, case_ids: List[int], fields: Dict[str, Any]) -> Any:
        """Apply the same field values to several cases of one suite."""
        if not case_ids:
            raise InputValidationError("case_ids must contain at least one case ID")
        payload = dict(fields)
        payload["case_ids"] = [require_id(case_id, "case_id") for case_id in case_ids]
        return self._post(f"update_cases/{require_id(suite_id, 'suite_id')}", payload)

    def copy_cases_to_section(self, section_id: int, case_ids: List[int]) -> Any:
        if not case_ids:
            raise InputValidationError("case_ids must contain at least one case ID")
        payload = {"case_ids": [require_id(case_id, "case_id") for case_id in case_ids]}
        return self._post(f"copy_cases_to_section/{require_id(section_id, 'section_id')}", payload)

    def move_cases_to_section(self, section_id: int, suite_id: int, case_ids: List[int]) -> Any:
        if not case_ids:
            raise InputValidationError("case_ids must contain at least one case ID")
        section_id = require_id(section_id, "section_id")
        payload = {
            "section_id": section_id,
            "suite_id": require_id(suite_id, "suite_id"),
            "case_ids": [require_id(case_id, "case_id") for case_id in case_ids],
        }
        return self._post(f"move_cases_to_section/{section_id}", payload)
