"""Pydantic models for list envelopes and structured tool inputs."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import DeserializationError


class Page(BaseModel):
    """
    One page of a TestRail list endpoint.

    TestRail 6.7+ wraps lists in an envelope::

        {"offset": 0, "limit": 250, "size": 2,
         "_links": {"next": null, "prev": null},
         "cases": [...]}

    while older instances (and some endpoints) return the bare array. The
    caller names the envelope key it expects; nothing else is accepted.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str
    items: List[Any] = Field(default_factory=list)
    offset: int = 0
    limit: Optional[int] = None
    size: int = 0
    links: Dict[str, Optional[str]] = Field(default_factory=dict, alias="_links")

    @classmethod
    def from_response(cls, value: Any, key: str, endpoint: Optional[str] = None) -> "Page":
        if isinstance(value, list):
            return cls(key=key, items=value, size=len(value))

        if isinstance(value, dict) and isinstance(value.get(key), list):
            items = value[key]
            return cls(
                key=key,
                items=items,
                offset=value.get("offset") or 0,
                limit=value.get("limit"),
                size=value.get("size", len(items)),
                links=value.get("_links") or {},
            )

        raise DeserializationError(
            f"Expected a list or an object with a '{key}' list from {endpoint or 'TestRail'}, "
            f"got {type(value).__name__}",
            endpoint=endpoint,
            body_preview=str(value)[:500],
        )

    @property
    def has_more(self) -> bool:
        return bool(self.links.get("next"))

    def to_response(self) -> Dict[str, Any]:
        """Payload used by list tools: items under their entity key plus paging info."""
        return {
            self.key: self.items,
            "offset": self.offset,
            "limit": self.limit,
            "size": self.size,
            "_links": self.links,
        }


# ---------------------------------------------------------------------------
# Tool inputs
# ---------------------------------------------------------------------------


class CaseStep(BaseModel):
    """One entry of ``custom_steps_separated``."""

    content: str = Field(description="The action/step to perform")
    expected: Optional[str] = Field(default=None, description="Expected result for this step")
    additional_info: Optional[str] = Field(default=None, description="Additional information")
    refs: Optional[str] = Field(default=None, description="References for this step")
    shared_step_id: Optional[int] = Field(default=None, description="Use a shared step instead of inline content")


class SharedStepContent(BaseModel):
    """One step inside a shared step set."""

    content: Optional[str] = None
    additional_info: Optional[str] = None
    expected: Optional[str] = None
    refs: Optional[str] = None


class StepResult(BaseModel):
    """Per-step outcome for ``custom_step_results``."""

    content: str
    expected: Optional[str] = None
    actual: Optional[str] = None
    status_id: int


class ResultFields(BaseModel):
    """Common fields of a test result. Extra keys are sent as custom fields."""

    model_config = ConfigDict(extra="allow")

    status_id: Optional[int] = Field(default=None, description="1=Passed, 2=Blocked, 3=Untested, 4=Retest, 5=Failed")
    comment: Optional[str] = None
    version: Optional[str] = None
    elapsed: Optional[str] = Field(default=None, description="Time spent, e.g. '30s' or '1m 45s'")
    defects: Optional[str] = Field(default=None, description="Comma-separated defect IDs")
    assignedto_id: Optional[int] = None
    custom_step_results: Optional[List[StepResult]] = None


class TestResultEntry(ResultFields):
    """Result addressed by test ID (``add_results``)."""

    test_id: int


class CaseResultEntry(ResultFields):
    """Result addressed by case ID (``add_results_for_cases``)."""

    case_id: int


class CaseDraft(BaseModel):
    """A test case to create in a batch. Extra ``custom_*`` keys pass through."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(description="The title of the test case")
    template_id: Optional[int] = None
    type_id: Optional[int] = None
    priority_id: Optional[int] = None
    estimate: Optional[str] = None
    milestone_id: Optional[int] = None
    refs: Optional[str] = None
    labels: Optional[List[Union[int, str]]] = None
    custom_preconds: Optional[str] = None
    custom_steps: Optional[str] = None
    custom_expected: Optional[str] = None
    custom_steps_separated: Optional[List[CaseStep]] = None
    custom_mission: Optional[str] = None
    custom_goals: Optional[str] = None


class PlanRun(BaseModel):
    """A configuration-specific run inside a plan entry."""

    model_config = ConfigDict(extra="allow")

    include_all: Optional[bool] = None
    case_ids: Optional[List[int]] = None
    config_ids: Optional[List[int]] = None
    assignedto_id: Optional[int] = None


class PlanEntry(BaseModel):
    """An entry (suite-based run group) of a test plan."""

    model_config = ConfigDict(extra="allow")

    suite_id: int
    name: Optional[str] = None
    description: Optional[str] = None
    assignedto_id: Optional[int] = None
    include_all: Optional[bool] = None
    case_ids: Optional[List[int]] = None
    config_ids: Optional[List[int]] = None
    refs: Optional[str] = None
    runs: Optional[List[PlanRun]] = None


class CaseFieldContext(BaseModel):
    is_global: bool = True
    project_ids: Optional[Union[List[int], str]] = None


class CaseFieldConfig(BaseModel):
    """Context/options pair of a custom case field."""

    context: CaseFieldContext
    options: Dict[str, Any] = Field(default_factory=dict)


def dump_model(model: BaseModel) -> Dict[str, Any]:
    """Serialize an input model for a request body, dropping unset fields."""
    return model.model_dump(exclude_none=True)
