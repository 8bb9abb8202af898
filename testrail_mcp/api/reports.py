"""Reports and read-mostly instance metadata (priorities, types, fields, statuses)."""

from typing import Any, Dict, List, Optional

from ..errors import InputValidationError
from .base import EntityAPI, compact, require_id

# Field types accepted by add_case_field
CASE_FIELD_TYPES = (
    "String", "Integer", "Text", "URL", "Checkbox", "Dropdown",
    "User", "Date", "Milestone", "Steps", "Multiselect",
)


class ReportsAPI(EntityAPI):

    def get_reports(self, project_id: int) -> List[Dict[str, Any]]:
        """Report templates configured for API access in a project."""
        return self._get(f"get_reports/{require_id(project_id, 'project_id')}")

    def run_report(self, report_template_id: int) -> Dict[str, Any]:
        """Execute a report template; the response carries the report URLs."""
        return self._get(f"run_report/{require_id(report_template_id, 'report_template_id')}")


class MetadataAPI(EntityAPI):

    def get_priorities(self) -> List[Dict[str, Any]]:
        return self._get("get_priorities")

    def get_case_types(self) -> List[Dict[str, Any]]:
        return self._get("get_case_types")

    def get_case_fields(self) -> List[Dict[str, Any]]:
        return self._get("get_case_fields")

    def add_case_field(
        self,
        type: str,
        name: str,
        label: str,
        description: Optional[str] = None,
        include_all: Optional[bool] = None,
        template_ids: Optional[List[int]] = None,
        configs: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Create a custom case field.

        ``name`` is the system name without the ``custom_`` prefix TestRail adds.
        """
        if type not in CASE_FIELD_TYPES:
            raise InputValidationError(
                f"Unsupported case field type '{type}'; expected one of {', '.join(CASE_FIELD_TYPES)}"
            )
        payload = compact({
            "type": type,
            "name": name,
            "label": label,
            "description": description,
            "include_all": include_all,
            "template_ids": template_ids,
            "configs": configs,
        })
        return self._post("add_case_field", payload)

    def get_templates(self, project_id: int) -> List[Dict[str, Any]]:
        return self._get(f"get_templates/{require_id(project_id, 'project_id')}")

    def get_statuses(self) -> List[Dict[str, Any]]:
        return self._get("get_statuses")

    def get_case_statuses(self) -> List[Dict[str, Any]]:
        # Enterprise 7.3+ only
        return self._get("get_case_statuses")

    def get_result_fields(self) -> List[Dict[str, Any]]:
        return self._get("get_result_fields")

    def get_configs(self, project_id: int) -> List[Dict[str, Any]]:
        """Configuration groups of a project, each with its configs."""
        return self._get(f"get_configs/{require_id(project_id, 'project_id')}")
