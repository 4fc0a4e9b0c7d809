from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from route_extract.api.routes.extract import get_oracle, get_pipeline
from route_extract.config import Settings
from route_extract.main import app
from route_extract.models.route_models import RouteMetadata
from route_extract.services.errors import SnappingUnavailable
from route_extract.services.reconstruction import ReconstructionPipeline
from route_extract.services.vision_oracle import OracleExtraction


SCENARIO_WAYPOINTS = [[40.00, -105.00, 5000], [40.01, -105.00, 5100], [40.02, -105.01, 5300]]


class FakeSnapper:
    def __init__(self, geometry=None, error=None):
        self.geometry = geometry
        self.error = error
        self.calls = []

    def snap(self, waypoints):
        self.calls.append(list(waypoints))
        if self.error is not None:
            raise self.error
        return list(self.geometry)


class FakeOracle:
    def __init__(self, extraction=None, error=None):
        self.extraction = extraction
        self.error = error
        self.calls = []

    def extract(self, image_b64, media_type=None):
        self.calls.append((image_b64, media_type))
        if self.error is not None:
            raise self.error
        return self.extraction


class FakeMessages:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        content = [] if self.text is None else [SimpleNamespace(type="text", text=self.text)]
        return SimpleNamespace(content=content)


class FakeAnthropicClient:
    def __init__(self, text=None, error=None):
        self.messages = FakeMessages(text=text, error=error)


def straight_geometry(n, start=(40.0, -105.0), end=(40.02, -105.01)):
    return [
        (start[0] + (end[0] - start[0]) * i / (n - 1), start[1] + (end[1] - start[1]) * i / (n - 1))
        for i in range(n)
    ]


@pytest.fixture
def settings():
    return Settings(anthropic_api_key="test-key")


@pytest.fixture
def unavailable_snapper():
    return FakeSnapper(error=SnappingUnavailable("OSRM returned code='NoRoute'"))


@pytest.fixture
def scenario_extraction():
    return OracleExtraction(
        waypoints=SCENARIO_WAYPOINTS,
        metadata=RouteMetadata(route_name="Boulder Loop", location="Boulder, CO", confidence=0.8, notes="clear map"),
    )


@pytest.fixture
def make_client(settings):
    def _make(oracle, snapper=None, **client_kwargs):
        app.dependency_overrides[get_oracle] = lambda: oracle
        app.dependency_overrides[get_pipeline] = lambda: ReconstructionPipeline(settings, snapper=snapper)
        return TestClient(app, **client_kwargs)

    yield _make
    app.dependency_overrides.clear()
