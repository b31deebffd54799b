import warnings
warnings.filterwarnings("ignore")

import logging
import threading

import uvicorn

from anpr_focus.core.config import settings
from anpr_focus.api.main import create_app
from anpr_focus.application.plate_focus_service import PlateFocusService
from anpr_focus.domain.Services.plate_filter import PlateFilter
from anpr_focus.domain.Services.plate_registry import PlateRegistry
from anpr_focus.domain.Services.roi_search import RoiNarrowingSearch
from anpr_focus.domain.Services.voting_service import VotingService
from anpr_focus.infrastructure.Camera.opencv_camera_stream import OpenCVCameraStream
from anpr_focus.infrastructure.Display.static_display_geometry import StaticDisplayGeometry
from anpr_focus.infrastructure.Normalizer.plate_normalizer import PlateNormalizer
from anpr_focus.infrastructure.Prompt.factory import create_confirmation_prompt
from anpr_focus.infrastructure.TextDetector.factory import create_text_detector
from anpr_focus.monitoring.metrics import start_metrics_server

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def build_service() -> PlateFocusService:
    normalizer = PlateNormalizer()
    detector = create_text_detector()
    registry = PlateRegistry()

    plate_filter = PlateFilter(normalizer)
    plate_filter.update_vertical_fraction(settings.vertical_fraction)
    plate_filter.update_horizontal_fraction(settings.horizontal_fraction)

    camera = OpenCVCameraStream(
        url=settings.camera_url,
        rotation_degrees=settings.camera_rotation,
        fps_limit=settings.max_fps,
    )

    return PlateFocusService(
        detector=detector,
        plate_filter=plate_filter,
        roi_search=RoiNarrowingSearch(detector, normalizer),
        voting=VotingService(registry, normalizer),
        registry=registry,
        prompt=create_confirmation_prompt(),
        camera_stream=camera,
        display_geometry=StaticDisplayGeometry(),
    )


def main():
    start_metrics_server(port=settings.prometheus_port)

    service = build_service()
    service.start()

    # API HTTP
    app = create_app(service)
    threading.Thread(
        target=uvicorn.run,
        kwargs={"app": app, "host": "0.0.0.0", "port": settings.app_port, "log_level": "warning"},
        daemon=True,
    ).start()

    logger.info("🚀 ANPR focus iniciado.")

    try:
        while True:
            threading.Event().wait(5)
    except KeyboardInterrupt:
        logger.info("🧠 Deteniendo…")
    finally:
        service.stop()


if __name__ == "__main__":
    main()
