"""Test plans and plan entries."""

from typing import Any, Dict, Optional, Sequence

from ..models import Page
from .base import EntityAPI, build_query, require_id, require_path_segment


class PlansAPI(EntityAPI):

    def get_plan(self, plan_id: int) -> Dict[str, Any]:
        return self._get(f"get_plan/{require_id(plan_id, 'plan_id')}")

    def get_plans(
        self,
        project_id: int,
        created_after: Optional[int] = None,
        created_before: Optional[int] = None,
        created_by: Optional[Sequence[int]] = None,
        is_completed: Optional[bool] = None,
        milestone_id: Optional[Sequence[int]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(
            created_after=created_after,
            created_before=created_before,
            created_by=created_by,
            is_completed=is_completed,
            milestone_id=milestone_id,
            limit=limit,
            offset=offset,
        )
        return self._get_page(f"get_plans/{require_id(project_id, 'project_id')}", "plans", params)

    def add_plan(self, project_id: int, plan: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"add_plan/{require_id(project_id, 'project_id')}", plan)

    def add_plan_entry(self, plan_id: int, entry: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"add_plan_entry/{require_id(plan_id, 'plan_id')}", entry)

    def add_run_to_plan_entry(self, plan_id: int, entry_id: str, run: Dict[str, Any]) -> Dict[str, Any]:
        # Entry IDs are GUID strings, not integers
        path = f"add_run_to_plan_entry/{require_id(plan_id, 'plan_id')}/{require_path_segment(entry_id, 'entry_id')}"
        return self._post(path, run)

    def update_plan(self, plan_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"update_plan/{require_id(plan_id, 'plan_id')}", fields)

    def update_plan_entry(self, plan_id: int, entry_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        path = f"update_plan_entry/{require_id(plan_id, 'plan_id')}/{require_path_segment(entry_id, 'entry_id')}"
        return self._post(path, fields)

    def update_run_in_plan_entry(self, run_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"update_run_in_plan_entry/{require_id(run_id, 'run_id')}", fields)

    def close_plan(self, plan_id: int) -> Dict[str, Any]:
        return self._post(f"close_plan/{require_id(plan_id, 'plan_id')}")
