#!/usr/bin/env python3
"""
Unit tests for list envelopes and tool input models.
"""

import pytest
from pydantic import ValidationError

from testrail_mcp.errors import DeserializationError
from testrail_mcp.models import CaseDraft, CaseResultEntry, Page, PlanEntry, dump_model


class TestPage:

    @pytest.mark.unit
    def test_envelope(self):
        envelope = {
            "offset": 250,
            "limit": 250,
            "size": 2,
            "_links": {"next": "/api/v2/get_cases/1&limit=250&offset=500", "prev": "/api/v2/get_cases/1&limit=250&offset=0"},
            "cases": [{"id": 1}, {"id": 2}],
        }
        page = Page.from_response(envelope, "cases")

        assert page.items == [{"id": 1}, {"id": 2}]
        assert page.offset == 250
        assert page.has_more is True
        assert page.to_response() == {
            "cases": [{"id": 1}, {"id": 2}],
            "offset": 250,
            "limit": 250,
            "size": 2,
            "_links": envelope["_links"],
        }

    @pytest.mark.unit
    def test_bare_list(self):
        page = Page.from_response([{"id": 1}], "runs")

        assert page.size == 1
        assert page.offset == 0
        assert page.limit is None
        assert page.has_more is False
        assert page.to_response()["runs"] == [{"id": 1}]

    @pytest.mark.unit
    def test_last_page_has_no_more(self):
        page = Page.from_response({"size": 0, "_links": {"next": None, "prev": None}, "plans": []}, "plans")
        assert page.has_more is False
        assert page.items == []

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [
        {"runs": [{"id": 1}]},
        {"cases": "not a list"},
        "<html></html>",
        None,
        42,
    ])
    def test_other_shapes_are_rejected(self, value):
        with pytest.raises(DeserializationError) as exc_info:
            Page.from_response(value, "cases", endpoint="get_cases/1")
        assert "get_cases/1" in str(exc_info.value)


class TestInputModels:

    @pytest.mark.unit
    def test_case_draft_keeps_custom_fields(self):
        draft = CaseDraft(title="Checkout", priority_id=2, custom_automation_type=1)
        assert dump_model(draft) == {"title": "Checkout", "priority_id": 2, "custom_automation_type": 1}

    @pytest.mark.unit
    def test_case_draft_requires_title(self):
        with pytest.raises(ValidationError):
            CaseDraft(priority_id=2)

    @pytest.mark.unit
    def test_case_result_entry_with_steps(self):
        entry = CaseResultEntry(
            case_id=7,
            status_id=5,
            custom_step_results=[{"content": "Open page", "status_id": 5, "actual": "500 error"}],
        )
        assert dump_model(entry) == {
            "case_id": 7,
            "status_id": 5,
            "custom_step_results": [{"content": "Open page", "actual": "500 error", "status_id": 5}],
        }

    @pytest.mark.unit
    def test_plan_entry_nested_runs(self):
        entry = PlanEntry(suite_id=1, include_all=True, config_ids=[1, 2], runs=[{"config_ids": [1]}, {"config_ids": [2]}])
        assert dump_model(entry)["runs"] == [{"config_ids": [1]}, {"config_ids": [2]}]
