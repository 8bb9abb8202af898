"""Milestones and labels."""

from typing import Any, Dict, Optional

from ..models import Page
from .base import EntityAPI, build_query, require_id


class MilestonesAPI(EntityAPI):

    def get_milestones(
        self,
        project_id: int,
        is_completed: Optional[bool] = None,
        is_started: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(is_completed=is_completed, is_started=is_started, limit=limit, offset=offset)
        return self._get_page(f"get_milestones/{require_id(project_id, 'project_id')}", "milestones", params)

    def get_milestone(self, milestone_id: int) -> Dict[str, Any]:
        return self._get(f"get_milestone/{require_id(milestone_id, 'milestone_id')}")

    def add_milestone(self, project_id: int, milestone: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"add_milestone/{require_id(project_id, 'project_id')}", milestone)

    def update_milestone(self, milestone_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"update_milestone/{require_id(milestone_id, 'milestone_id')}", fields)


class LabelsAPI(EntityAPI):

    def get_labels(self, project_id: int, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        params = build_query(limit=limit, offset=offset)
        return self._get_page(f"get_labels/{require_id(project_id, 'project_id')}", "labels", params)

    def get_label(self, label_id: int) -> Dict[str, Any]:
        return self._get(f"get_label/{require_id(label_id, 'label_id')}")

    def update_label(self, label_id: int, project_id: int, title: str) -> Dict[str, Any]:
        payload = {"project_id": require_id(project_id, "project_id"), "title": title}
        return self._post(f"update_label/{require_id(label_id, 'label_id')}", payload)
