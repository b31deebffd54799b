import logging
import time
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from anpr_focus.monitoring.metrics import (
    frames_processed_total, frames_dropped_total, detector_latency,
    zoom_steps, prompts_raised_total, plates_confirmed_total,
    registry_size, pipeline_latency
)

from anpr_focus.core.config import settings
from anpr_focus.domain.errors import InvalidPlateTextError
from anpr_focus.domain.Models.frame import Frame
from anpr_focus.domain.Models.confirmation import PromptRequest
from anpr_focus.domain.Models.text_line import TextDetection
from anpr_focus.domain.Interfaces.camera_stream import ICameraStream
from anpr_focus.domain.Interfaces.text_detector import ITextDetector
from anpr_focus.domain.Interfaces.confirmation_prompt import IConfirmationPrompt
from anpr_focus.domain.Interfaces.display_geometry import IDisplayGeometry
from anpr_focus.domain.Services.plate_filter import PlateFilter
from anpr_focus.domain.Services.roi_search import RoiNarrowingSearch
from anpr_focus.domain.Services.voting_service import VotingService
from anpr_focus.domain.Services.plate_registry import PlateRegistry
from anpr_focus.utils.recent_detections import RecentDetections

logger = logging.getLogger(__name__)


class PlateFocusService:
    """
    Pipeline por frame: frame completo -> filtro/candidato, búsqueda ROI -> votación.

    Hilos:
        - captura (opcional, si hay camera_stream): lee frames y los entrega a submit_frame
        - procesamiento: un único worker; si está ocupado el frame se descarta (keep-latest)
        - ventana: evalúa la votación cada window_interval_ms
        - prompts: un único worker que pregunta al operador y aplica la respuesta
    """

    def __init__(
        self,
        detector: ITextDetector,
        plate_filter: PlateFilter,
        roi_search: RoiNarrowingSearch,
        voting: VotingService,
        registry: PlateRegistry,
        prompt: IConfirmationPrompt,
        camera_stream: Optional[ICameraStream] = None,
        display_geometry: Optional[IDisplayGeometry] = None,
        plate_detection_enabled: Optional[bool] = None,
        window_interval_ms: Optional[int] = None,
        recent_retention_ms: Optional[int] = None,
        max_fps: Optional[float] = None,
    ):
        self.detector = detector
        self.plate_filter = plate_filter
        self.roi_search = roi_search
        self.voting = voting
        self.registry = registry
        self.prompt = prompt
        self.camera_stream = camera_stream
        self.display_geometry = display_geometry

        self.plate_detection_enabled = (
            plate_detection_enabled if plate_detection_enabled is not None else settings.plate_detection_enabled
        )
        interval_ms = window_interval_ms if window_interval_ms is not None else settings.window_interval_ms
        self.window_interval = interval_ms / 1000.0
        retention_ms = recent_retention_ms if recent_retention_ms is not None else settings.recent_strings_retention_ms
        self.recent = RecentDetections(retention_s=retention_ms / 1000.0)

        self.max_fps = max_fps if max_fps is not None else settings.max_fps
        self.frame_interval = 1.0 / self.max_fps if self.max_fps > 0 else 0.0

        self.camera_id = getattr(camera_stream, "camera_id", None) or "default"

        self.stop_event = threading.Event()

        # "processing flag": sólo un frame en vuelo
        self._processing = threading.Lock()
        self.frame_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="frame")
        self.prompt_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prompt")

        # threads
        self.capture_thread: Optional[threading.Thread] = None
        self.window_thread: Optional[threading.Thread] = None

    # ---------------------------------------------------------
    # START / STOP
    # ---------------------------------------------------------
    def start(self):
        logger.info(f"Iniciando pipeline de placas ({self.camera_id})")

        self.stop_event.clear()

        if self.plate_detection_enabled:
            self.window_thread = threading.Thread(
                target=self._window_loop,
                name=f"window-{self.camera_id}",
                daemon=True,
            )
            self.window_thread.start()

        if self.camera_stream is not None:
            self.camera_stream.connect()
            self.capture_thread = threading.Thread(
                target=self._capture_loop,
                name=f"capture-{self.camera_id}",
                daemon=True,
            )
            self.capture_thread.start()

    def stop(self):
        logger.info(f"Deteniendo pipeline de placas ({self.camera_id})")

        self.stop_event.set()

        if self.capture_thread:
            self.capture_thread.join(timeout=2)
        if self.window_thread:
            self.window_thread.join(timeout=2)

        self.frame_executor.shutdown(wait=True)
        # el operador puede seguir en input(): no se espera al prompt en curso
        self.prompt_executor.shutdown(wait=False, cancel_futures=True)

        if self.camera_stream is not None:
            try:
                self.camera_stream.disconnect()
            except Exception:
                logger.exception("Error desconectando cámara")

    def shutdown(self, wait: bool = True):
        """Cierra los executors; con wait=True termina el frame en vuelo y sus prompts."""
        self.stop_event.set()
        self.frame_executor.shutdown(wait=wait)
        self.prompt_executor.shutdown(wait=wait)

    # ---------------------------------------------------------
    # CAPTURE LOOP
    # ---------------------------------------------------------
    def _capture_loop(self):
        last_frame_time = 0.0

        while not self.stop_event.is_set():
            now = time.perf_counter()

            if now - last_frame_time < self.frame_interval:
                time.sleep(0.001)
                continue

            frame = self.camera_stream.read_frame(timeout=1.0)
            last_frame_time = now

            if frame is None:
                time.sleep(0.1)
                continue

            self.submit_frame(frame)

    # ---------------------------------------------------------
    # FRAME INTAKE (keep-latest)
    # ---------------------------------------------------------
    def submit_frame(self, frame: Frame) -> bool:
        """
        Entrega un frame al worker. Devuelve False si se descartó porque
        otro frame seguía en proceso (el frame se cierra igualmente).
        """
        if not self._processing.acquire(blocking=False):
            frame.close()
            frames_dropped_total.inc()
            logger.debug(f"[{self.camera_id}] Frame descartado, worker ocupado")
            return False

        try:
            self.frame_executor.submit(self._run_frame, frame)
        except RuntimeError:
            # executor ya cerrado
            self._processing.release()
            frame.close()
            logger.warning(f"[{self.camera_id}] Pipeline detenido, frame descartado")
            return False
        return True

    def _run_frame(self, frame: Frame):
        try:
            self._process_frame(frame)
        finally:
            self._processing.release()
            frame.close()

    # ---------------------------------------------------------
    # PROCESSING (por frame)
    # ---------------------------------------------------------
    def _process_frame(self, frame: Frame):
        t0 = time.perf_counter()

        try:
            image = frame.upright()
            height, width = image.shape[:2]
            self._sync_preview_size()

            detection = self._detect_full_frame(image)
            if detection is not None:
                raw_text = self.plate_filter.filter_visible_text(detection, width, height)
                if raw_text:
                    self.recent.add(raw_text)

                algorithm_result = self.plate_filter.compute_algorithm_result(detection, width, height)
                if algorithm_result:
                    self._dispatch_prompt(self.voting.register_algorithm_result(algorithm_result))

            if self.plate_detection_enabled:
                zoom_result = self.roi_search.search(image)
                zoom_steps.observe(self.roi_search.last_steps)
                if zoom_result is None:
                    logger.debug(f"[{self.camera_id}] Búsqueda ROI sin resultado")
                else:
                    self._dispatch_prompt(self.voting.add_zoom_result(zoom_result))

            frames_processed_total.inc()
            pipeline_latency.set(time.perf_counter() - t0)

        except Exception:
            logger.exception(f"[{self.camera_id}] Error procesando frame")

    def _detect_full_frame(self, image) -> Optional[TextDetection]:
        t1 = time.perf_counter()
        try:
            detection = self.detector.detect(image)
        except Exception:
            logger.exception(f"[{self.camera_id}] Detector falló sobre el frame completo")
            return None
        detector_latency.set(time.perf_counter() - t1)
        return detection

    def _sync_preview_size(self):
        if self.display_geometry is None:
            return
        width, height = self.display_geometry.preview_size()
        self.plate_filter.update_preview_size(width, height)

    # ---------------------------------------------------------
    # WINDOW TIMER
    # ---------------------------------------------------------
    def _window_loop(self):
        while not self.stop_event.wait(self.window_interval):
            try:
                winner = self.voting.evaluate_window()
                if winner:
                    logger.debug(f"[{self.camera_id}] Ventana cerrada, ganador={winner}")
                registry_size.set(len(self.registry))
            except Exception:
                logger.exception(f"[{self.camera_id}] Error evaluando ventana")

        logger.info(f"[{self.camera_id}] Timer de ventana terminado")

    # ---------------------------------------------------------
    # PROMPTS
    # ---------------------------------------------------------
    def _dispatch_prompt(self, request: Optional[PromptRequest]):
        if request is None:
            return
        prompts_raised_total.labels(track=request.track.value).inc()
        try:
            self.prompt_executor.submit(self._handle_prompt, request)
        except RuntimeError:
            # executor cerrado: liberar la pista sin tocar el registro
            logger.warning(f"[{self.camera_id}] Prompt descartado para {request.text}")
            self.voting.release(request)

    def _handle_prompt(self, request: PromptRequest):
        try:
            outcome = self.prompt.ask(request)
            confirmed = self.voting.resolve(request, outcome)
            if confirmed:
                plates_confirmed_total.inc()
                logger.info(f"✅ Placa confirmada: {confirmed}")
            registry_size.set(len(self.registry))
        except InvalidPlateTextError as e:
            logger.warning(f"[{self.camera_id}] Edición inválida: {e}")
            self.prompt.show_notice(str(e))
        except Exception:
            logger.exception(f"[{self.camera_id}] Error resolviendo confirmación de {request.text}")
            self.voting.release(request)

    # ---------------------------------------------------------
    # CONSULTAS
    # ---------------------------------------------------------
    def recent_strings(self) -> List[str]:
        return self.recent.items()

    def remove_plate(self, text: str) -> bool:
        removed = self.voting.remove_plate(text)
        registry_size.set(len(self.registry))
        return removed
