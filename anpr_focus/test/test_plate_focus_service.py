import threading
import time

import numpy as np

from anpr_focus.application.plate_focus_service import PlateFocusService
from anpr_focus.domain.Interfaces.confirmation_prompt import IConfirmationPrompt
from anpr_focus.domain.Models.confirmation import ConfirmationOutcome, OutcomeKind, PromptTrack
from anpr_focus.domain.Models.frame import Frame
from anpr_focus.domain.Services.plate_filter import PlateFilter
from anpr_focus.domain.Services.plate_registry import PlateRegistry
from anpr_focus.domain.Services.roi_search import RoiNarrowingSearch
from anpr_focus.domain.Services.voting_service import VotingService
from anpr_focus.infrastructure.Display.static_display_geometry import StaticDisplayGeometry
from anpr_focus.infrastructure.Prompt.auto_prompt import AutoConfirmationPrompt
from anpr_focus.infrastructure.TextDetector.dummy_text_detector import DummyTextDetector

from anpr_focus.test.fakes import FailingTextDetector, GatedTextDetector, ScriptedTextDetector


class EditingPrompt(IConfirmationPrompt):
    def __init__(self, text):
        self.text = text
        self.notices = []

    def ask(self, request):
        return ConfirmationOutcome.edited(self.text)

    def show_notice(self, message):
        self.notices.append(message)


def build_service(normalizer, detector, prompt=None, plate_detection_enabled=True, **voting_kwargs):
    registry = PlateRegistry(similarity=lambda a, b, s: 0.0)
    voting = VotingService(
        registry,
        normalizer,
        confirmation_threshold=voting_kwargs.get("confirmation_threshold", 2),
        algorithm_confirmation_threshold=voting_kwargs.get("algorithm_confirmation_threshold", 3),
    )
    return PlateFocusService(
        detector=detector,
        plate_filter=PlateFilter(normalizer),
        roi_search=RoiNarrowingSearch(detector, normalizer, max_steps=6),
        voting=voting,
        registry=registry,
        prompt=prompt or AutoConfirmationPrompt(),
        display_geometry=StaticDisplayGeometry(0, 0),
        plate_detection_enabled=plate_detection_enabled,
        window_interval_ms=300,
        recent_retention_ms=5000,
    )


def make_frame(width=400, height=200, rotation=0):
    done = threading.Event()
    shape = (width, height) if rotation % 180 else (height, width)
    frame = Frame(
        data=np.zeros(shape + (3,), dtype=np.uint8),
        timestamp=time.time(),
        source="test",
        rotation_degrees=rotation,
        _release=lambda f: done.set(),
    )
    return frame, done


def run_frame(service, **kwargs):
    frame, done = make_frame(**kwargs)
    assert service.submit_frame(frame) is True
    assert done.wait(timeout=5)
    return frame


def test_two_frames_confirm_plate_through_window_track(normalizer):
    prompt = AutoConfirmationPrompt()
    service = build_service(normalizer, DummyTextDetector("ABC123"), prompt)

    run_frame(service)
    run_frame(service)
    service.shutdown(wait=True)

    assert [r.track for r in prompt.requests] == [PromptTrack.WINDOW]
    assert service.registry.is_confirmed("ABC123")
    assert "ABC123" in service.registry
    assert service.voting.algorithm_count("ABC123") == 0
    assert service.recent_strings() == ["ABC123", "ABC123"]


def test_frames_are_closed_after_processing(normalizer):
    service = build_service(normalizer, DummyTextDetector("ABC123"))
    frame = run_frame(service)
    service.shutdown(wait=True)
    assert frame.closed


def test_busy_worker_drops_new_frames(normalizer):
    detector = GatedTextDetector(DummyTextDetector("ABC123"))
    service = build_service(normalizer, detector)

    first, first_done = make_frame()
    second, _ = make_frame()
    assert service.submit_frame(first) is True
    assert detector.entered.wait(timeout=5)

    assert service.submit_frame(second) is False
    assert second.closed

    detector.gate.set()
    assert first_done.wait(timeout=5)
    service.shutdown(wait=True)


def test_detector_failure_does_not_stop_pipeline(normalizer):
    detector = FailingTextDetector()
    service = build_service(normalizer, detector, plate_detection_enabled=False)

    run_frame(service)
    run_frame(service)
    service.shutdown(wait=True)

    assert detector.calls == 2
    assert len(service.registry) == 0


def test_narrowing_disabled_skips_roi_search(normalizer):
    detector = ScriptedTextDetector([[]])
    service = build_service(normalizer, detector, plate_detection_enabled=False)

    run_frame(service)
    service.shutdown(wait=True)

    assert detector.calls == 1


def test_algorithm_track_confirms_after_three_frames(normalizer):
    prompt = AutoConfirmationPrompt()
    service = build_service(normalizer, DummyTextDetector("XY-987"), prompt, plate_detection_enabled=False)

    for _ in range(3):
        run_frame(service)
    service.shutdown(wait=True)

    assert [r.track for r in prompt.requests] == [PromptTrack.ALGORITHM]
    assert prompt.requests[0].display_text == "XY-987"
    assert service.registry.get("XY987").area == 0


def test_invalid_edit_shows_notice(normalizer):
    prompt = EditingPrompt("x")
    service = build_service(
        normalizer, DummyTextDetector("ABC123"), prompt,
        confirmation_threshold=1, algorithm_confirmation_threshold=99,
    )

    run_frame(service)
    service.shutdown(wait=True)

    assert len(prompt.notices) == 1
    assert len(service.registry) == 0
    assert not service.voting.prompt_pending(PromptTrack.WINDOW)


def test_rejected_prompt_leaves_registry_empty(normalizer):
    prompt = AutoConfirmationPrompt(OutcomeKind.REJECTED)
    service = build_service(normalizer, DummyTextDetector("ABC123"), prompt)

    run_frame(service)
    run_frame(service)
    service.shutdown(wait=True)

    assert len(prompt.requests) == 1
    assert len(service.registry) == 0


def test_rotated_frame_is_made_upright(normalizer):
    detector = ScriptedTextDetector([[]])
    service = build_service(normalizer, detector, plate_detection_enabled=False)

    run_frame(service, rotation=90)
    service.shutdown(wait=True)

    assert detector.shapes[0][:2] == (200, 400)


def test_window_timer_evaluates_periodically(normalizer):
    service = build_service(normalizer, DummyTextDetector("ABC123"))
    service.window_interval = 0.01
    service.registry.confirm("ABC123")

    service.start()
    try:
        run_frame(service)
        deadline = time.time() + 5
        while service.voting.window_counts() and time.time() < deadline:
            time.sleep(0.01)
    finally:
        service.stop()

    assert service.voting.window_counts() == {}
    assert "ABC123" in service.registry


def test_submit_after_shutdown_is_rejected(normalizer):
    service = build_service(normalizer, DummyTextDetector("ABC123"))
    service.shutdown(wait=True)

    frame, _ = make_frame()
    assert service.submit_frame(frame) is False
    assert frame.closed


def test_remove_plate(normalizer):
    service = build_service(normalizer, DummyTextDetector("ABC123"))
    run_frame(service)
    run_frame(service)
    service.shutdown(wait=True)

    assert service.remove_plate("ABC123") is True
    assert service.remove_plate("ABC123") is False


class BlockingPrompt(IConfirmationPrompt):
    def __init__(self):
        self.entered = threading.Event()
        self.gate = threading.Event()

    def ask(self, request):
        self.entered.set()
        self.gate.wait(timeout=5)
        return ConfirmationOutcome.cancelled()

    def show_notice(self, message):
        pass


def test_stop_does_not_wait_for_operator_answer(normalizer):
    prompt = BlockingPrompt()
    service = build_service(normalizer, DummyTextDetector("ABC123"), prompt)

    run_frame(service)
    run_frame(service)
    assert prompt.entered.wait(timeout=5)

    t0 = time.monotonic()
    service.stop()
    elapsed = time.monotonic() - t0
    prompt.gate.set()

    assert elapsed < 2
