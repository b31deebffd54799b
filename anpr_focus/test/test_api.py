import numpy as np
import pytest
from fastapi.testclient import TestClient

from anpr_focus.api.main import create_app
from anpr_focus.application.plate_focus_service import PlateFocusService
from anpr_focus.domain.Models.plate import PlateDetection
from anpr_focus.domain.Models.rect import Rect
from anpr_focus.domain.Services.plate_filter import PlateFilter
from anpr_focus.domain.Services.plate_registry import PlateRegistry
from anpr_focus.domain.Services.roi_search import RoiNarrowingSearch
from anpr_focus.domain.Services.voting_service import VotingService
from anpr_focus.infrastructure.Prompt.auto_prompt import AutoConfirmationPrompt
from anpr_focus.infrastructure.TextDetector.dummy_text_detector import DummyTextDetector


@pytest.fixture
def service(normalizer):
    detector = DummyTextDetector()
    registry = PlateRegistry(similarity=lambda a, b, s: 0.0)
    service = PlateFocusService(
        detector=detector,
        plate_filter=PlateFilter(normalizer),
        roi_search=RoiNarrowingSearch(detector, normalizer),
        voting=VotingService(registry, normalizer),
        registry=registry,
        prompt=AutoConfirmationPrompt(),
    )
    yield service
    service.shutdown(wait=True)


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


def confirm(service, text, area):
    service.registry.confirm(text)
    service.registry.insert_or_update(text, area, np.zeros((10, 30, 3), dtype=np.uint8))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_plates_sorted(client, service):
    confirm(service, "ZZZ999", 300)
    confirm(service, "AAA111", 120)

    response = client.get("/plates")

    assert response.json() == {
        "plates": [{"text": "AAA111", "area": 120}, {"text": "ZZZ999", "area": 300}]
    }


def test_delete_plate(client, service):
    confirm(service, "AAA111", 120)

    assert client.delete("/plates/AAA111").json() == {"removed": "AAA111"}
    assert not service.registry.is_confirmed("AAA111")
    assert client.delete("/plates/AAA111").status_code == 404


def test_ranking(client, service):
    confirm(service, "AAA111", 120)
    detection = PlateDetection("BBB222", 100, np.zeros((10, 30, 3), dtype=np.uint8), Rect(0, 0, 10, 10), 0.1)
    service.voting.add_detection(detection)

    assert client.get("/ranking").json() == {
        "window": [{"text": "BBB222", "count": 1}],
        "confirmed": ["AAA111"],
    }


def test_recent(client, service):
    service.recent.add("ABC123")
    assert client.get("/recent").json() == {"recent": ["ABC123"]}


def test_export_plates_as_text(client, service):
    confirm(service, "ZZZ999", 300)
    confirm(service, "AAA111", 120)

    response = client.get("/plates/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "AAA111\nZZZ999"
