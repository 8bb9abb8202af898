"""Entity clients for the TestRail REST API, bundled behind ``TestRailClient``."""

from ..gateway import TestRailGateway
from .attachments import AttachmentsAPI
from .cases import CasesAPI
from .milestones import LabelsAPI, MilestonesAPI
from .plans import PlansAPI
from .projects import ProjectsAPI, SuitesAPI
from .reports import MetadataAPI, ReportsAPI
from .results import ResultsAPI
from .runs import RunsAPI
from .sections import SectionsAPI
from .shared_steps import SharedStepsAPI, VariablesAPI
from .tests import TestsAPI


class TestRailClient:
    """All entity clients sharing a single gateway."""

    def __init__(self, gateway: TestRailGateway):
        self.gateway = gateway
        self.projects = ProjectsAPI(gateway)
        self.suites = SuitesAPI(gateway)
        self.sections = SectionsAPI(gateway)
        self.cases = CasesAPI(gateway)
        self.runs = RunsAPI(gateway)
        self.plans = PlansAPI(gateway)
        self.results = ResultsAPI(gateway)
        self.tests = TestsAPI(gateway)
        self.milestones = MilestonesAPI(gateway)
        self.labels = LabelsAPI(gateway)
        self.shared_steps = SharedStepsAPI(gateway)
        self.variables = VariablesAPI(gateway)
        self.attachments = AttachmentsAPI(gateway)
        self.reports = ReportsAPI(gateway)
        self.metadata = MetadataAPI(gateway)

    @classmethod
    def from_settings(cls, settings) -> "TestRailClient":
        return cls(TestRailGateway.from_settings(settings))


__all__ = [
    "TestRailClient",
    "AttachmentsAPI",
    "CasesAPI",
    "LabelsAPI",
    "MetadataAPI",
    "MilestonesAPI",
    "PlansAPI",
    "ProjectsAPI",
    "ReportsAPI",
    "ResultsAPI",
    "RunsAPI",
    "SectionsAPI",
    "SharedStepsAPI",
    "SuitesAPI",
    "TestsAPI",
    "VariablesAPI",
]
