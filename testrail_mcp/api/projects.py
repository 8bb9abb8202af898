"""Projects and suites."""

from typing import Any, Dict, Optional

from ..models import Page
from .base import EntityAPI, build_query, compact, require_id


class ProjectsAPI(EntityAPI):

    def get_projects(self, is_completed: Optional[bool] = None, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        params = build_query(is_completed=is_completed, limit=limit, offset=offset)
        return self._get_page("get_projects", "projects", params)

    def get_project(self, project_id: int) -> Dict[str, Any]:
        return self._get(f"get_project/{require_id(project_id, 'project_id')}")


class SuitesAPI(EntityAPI):

    def get_suites(self, project_id: int) -> Page:
        return self._get_page(f"get_suites/{require_id(project_id, 'project_id')}", "suites")

    def get_suite(self, suite_id: int) -> Dict[str, Any]:
        return self._get(f"get_suite/{require_id(suite_id, 'suite_id')}")

    def add_suite(self, project_id: int, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        payload = compact({"name": name, "description": description})
        return self._post(f"add_suite/{require_id(project_id, 'project_id')}", payload)

    def update_suite(self, suite_id: int, name: Optional[str] = None, description: Optional[str] = None) -> Dict[str, Any]:
        payload = compact({"name": name, "description": description})
        return self._post(f"update_suite/{require_id(suite_id, 'suite_id')}", payload)

    def delete_suite(self, suite_id: int, soft: bool = False) -> Any:
        """Delete a suite. With ``soft`` TestRail only reports what would be deleted."""
        path = f"delete_suite/{require_id(suite_id, 'suite_id')}"
        if soft:
            # The soft variant answers with affected counts
            return self._post(path, params=build_query(soft=True), expects_empty_body=False)
        return self._post(path)
