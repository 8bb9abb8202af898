"""Sections: the folder hierarchy inside a suite."""

from typing import Any, Dict, Optional

from ..models import Page
from .base import EntityAPI, build_query, compact, require_id


class SectionsAPI(EntityAPI):

    def get_sections(
        self,
        project_id: int,
        suite_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(suite_id=suite_id, limit=limit, offset=offset)
        return self._get_page(f"get_sections/{require_id(project_id, 'project_id')}", "sections", params)

    def get_section(self, section_id: int) -> Dict[str, Any]:
        return self._get(f"get_section/{require_id(section_id, 'section_id')}")

    def add_section(
        self,
        project_id: int,
        name: str,
        suite_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = compact({
            "name": name,
            "suite_id": suite_id,
            "parent_id": parent_id,
            "description": description,
        })
        return self._post(f"add_section/{require_id(project_id, 'project_id')}", payload)

    def update_section(self, section_id: int, name: Optional[str] = None, description: Optional[str] = None) -> Dict[str, Any]:
        payload = compact({"name": name, "description": description})
        return self._post(f"update_section/{require_id(section_id, 'section_id')}", payload)

    def move_section(self, section_id: int, parent_id: Optional[int] = None, after_id: Optional[int] = None) -> Dict[str, Any]:
        # parent_id/after_id of null move the section to the top level / first position
        payload = {"parent_id": parent_id, "after_id": after_id}
        return self._post(f"move_section/{require_id(section_id, 'section_id')}", payload)

    def delete_section(self, section_id: int, soft: bool = False) -> Any:
        path = f"delete_section/{require_id(section_id, 'section_id')}"
        if soft:
            return self._post(path, params=build_query(soft=True), expects_empty_body=False)
        return self._post(path)
