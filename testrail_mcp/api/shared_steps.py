"""Shared steps and project variables."""

from typing import Any, Dict, List, Optional, Sequence

from ..models import Page
from .base import EntityAPI, build_query, compact, require_id


class SharedStepsAPI(EntityAPI):

    def get_shared_step(self, shared_step_id: int) -> Dict[str, Any]:
        return self._get(f"get_shared_step/{require_id(shared_step_id, 'shared_step_id')}")

    def get_shared_step_history(self, shared_step_id: int) -> Page:
        path = f"get_shared_step_history/{require_id(shared_step_id, 'shared_step_id')}"
        return self._get_page(path, "step_history")

    def get_shared_steps(
        self,
        project_id: int,
        created_after: Optional[int] = None,
        created_before: Optional[int] = None,
        created_by: Optional[Sequence[int]] = None,
        updated_after: Optional[int] = None,
        updated_before: Optional[int] = None,
        refs: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(
            created_after=created_after,
            created_before=created_before,
            created_by=created_by,
            updated_after=updated_after,
            updated_before=updated_before,
            refs=refs,
            limit=limit,
            offset=offset,
        )
        return self._get_page(f"get_shared_steps/{require_id(project_id, 'project_id')}", "shared_steps", params)

    def add_shared_step(self, project_id: int, title: str, steps: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        payload = compact({"title": title, "custom_steps_separated": steps})
        return self._post(f"add_shared_step/{require_id(project_id, 'project_id')}", payload)

    def update_shared_step(
        self,
        shared_step_id: int,
        title: Optional[str] = None,
        steps: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        payload = compact({"title": title, "custom_steps_separated": steps})
        return self._post(f"update_shared_step/{require_id(shared_step_id, 'shared_step_id')}", payload)

    def delete_shared_step(self, shared_step_id: int, keep_in_cases: bool = True) -> Any:
        """Delete a shared step; ``keep_in_cases`` copies its steps into the cases using it."""
        payload = {"keep_in_cases": 1 if keep_in_cases else 0}
        return self._post(f"delete_shared_step/{require_id(shared_step_id, 'shared_step_id')}", payload)


class VariablesAPI(EntityAPI):

    def get_variables(self, project_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        params = build_query(limit=limit, offset=offset)
        return self._get_page(f"get_variables/{require_id(project_id, 'project_id')}", "variables", params)

    def add_variable(self, project_id: int, name: str) -> Dict[str, Any]:
        return self._post(f"add_variable/{require_id(project_id, 'project_id')}", {"name": name})

    def update_variable(self, variable_id: int, name: str) -> Dict[str, Any]:
        return self._post(f"update_variable/{require_id(variable_id, 'variable_id')}", {"name": name})

    def delete_variable(self, variable_id: int) -> Any:
        return self._post(f"delete_variable/{require_id(variable_id, 'variable_id')}")
