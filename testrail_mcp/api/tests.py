"""Tests: the per-run instances of test cases."""

from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import InputValidationError
from ..models import Page
from .base import EntityAPI, build_query, require_id


class TestsAPI(EntityAPI):

    def get_test(self, test_id: int, with_data: Optional[str] = None) -> Dict[str, Any]:
        params = build_query(with_data=with_data)
        return self._get(f"get_test/{require_id(test_id, 'test_id')}", params)

    def get_tests(
        self,
        run_id: int,
        status_id: Optional[Sequence[int]] = None,
        label_id: Optional[Sequence[int]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        params = build_query(status_id=status_id, label_id=label_id, limit=limit, offset=offset)
        return self._get_page(f"get_tests/{require_id(run_id, 'run_id')}", "tests", params)

    def update_test(self, test_id: int, labels: List[Union[int, str]]) -> Dict[str, Any]:
        return self._post(f"update_test/{require_id(test_id, 'test_id')}", {"labels": labels})

    def update_tests(self, test_ids: List[int], labels: List[Union[int, str]]) -> Dict[str, Any]:
        if not test_ids:
            raise InputValidationError("test_ids must contain at least one test ID")
        payload = {
            "test_ids": [require_id(test_id, "test_id") for test_id in test_ids],
            "labels": labels,
        }
        return self._post("update_tests", payload)
