"""Test runs."""

from typing import Any, Dict, Optional, Sequence

from ..models import Page
from .base import EntityAPI, build_query, require_id


class RunsAPI(EntityAPI):

    def get_run(self, run_id: int) -> Dict[str, Any]:
        return self._get(f"get_run/{require_id(run_id, 'run_id')}")

    def get_runs(
        self,
        project_id: int,
        created_after: Optional[int] = None,
        created_before: Optional[int] = None,
        created_by: Optional[Sequence[int]] = None,
        is_completed: Optional[bool] = None,
        milestone_id: Optional[Sequence[int]] = None,
        refs_filter: Optional[str] = None,
        suite_id: Optional[Sequence[int]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(
            created_after=created_after,
            created_before=created_before,
            created_by=created_by,
            is_completed=is_completed,
            milestone_id=milestone_id,
            refs_filter=refs_filter,
            suite_id=suite_id,
            limit=limit,
            offset=offset,
        )
        return self._get_page(f"get_runs/{require_id(project_id, 'project_id')}", "runs", params)

    def add_run(self, project_id: int, run: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"add_run/{require_id(project_id, 'project_id')}", run)

    def update_run(self, run_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"update_run/{require_id(run_id, 'run_id')}", fields)

    def close_run(self, run_id: int) -> Dict[str, Any]:
        """Close a run; closed runs are archived and can no longer be edited."""
        return self._post(f"close_run/{require_id(run_id, 'run_id')}")
