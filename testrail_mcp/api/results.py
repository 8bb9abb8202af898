"""Test results: reading and recording execution outcomes."""

from typing import Any, Dict, List, Optional, Sequence

from ..errors import InputValidationError
from ..models import Page
from .base import EntityAPI, build_query, require_id


class ResultsAPI(EntityAPI):

    def get_results(
        self,
        test_id: int,
        status_id: Optional[Sequence[int]] = None,
        defects_filter: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(status_id=status_id, defects_filter=defects_filter, limit=limit, offset=offset)
        return self._get_page(f"get_results/{require_id(test_id, 'test_id')}", "results", params)

    def get_results_for_case(
        self,
        run_id: int,
        case_id: int,
        status_id: Optional[Sequence[int]] = None,
        defects_filter: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(status_id=status_id, defects_filter=defects_filter, limit=limit, offset=offset)
        path = f"get_results_for_case/{require_id(run_id, 'run_id')}/{require_id(case_id, 'case_id')}"
        return self._get_page(path, "results", params)

    def get_results_for_run(
        self,
        run_id: int,
        status_id: Optional[Sequence[int]] = None,
        defects_filter: Optional[str] = None,
        created_after: Optional[int] = None,
        created_before: Optional[int] = None,
        created_by: Optional[Sequence[int]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(
            status_id=status_id,
            defects_filter=defects_filter,
            created_after=created_after,
            created_before=created_before,
            created_by=created_by,
            limit=limit,
            offset=offset,
        )
        return self._get_page(f"get_results_for_run/{require_id(run_id, 'run_id')}", "results", params)

    def add_result(self, test_id: int, result: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"add_result/{require_id(test_id, 'test_id')}", result)

    def add_result_for_case(self, run_id: int, case_id: int, result: Dict[str, Any]) -> Dict[str, Any]:
        path = f"add_result_for_case/{require_id(run_id, 'run_id')}/{require_id(case_id, 'case_id')}"
        return self._post(path, result)

    def add_results(self, run_id: int, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Record several results at once; each entry carries its ``test_id``."""
        if not results:
            raise InputValidationError("results must contain at least one entry")
        return self._post(f"add_results/{require_id(run_id, 'run_id')}", {"results": results})

    def add_results_for_cases(self, run_id: int, results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Like ``add_results`` but each entry is addressed by ``case_id``."""
        if not results:
            raise InputValidationError("results must contain at least one entry")
        return self._post(f"add_results_for_cases/{require_id(run_id, 'run_id')}", {"results": results})
