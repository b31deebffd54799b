import cv2
import time
import logging
import threading
from typing import Optional, Union

from anpr_focus.core.config import settings
from anpr_focus.domain.Models.frame import Frame
from anpr_focus.domain.Interfaces.camera_stream import ICameraStream

logger = logging.getLogger(__name__)


class OpenCVCameraStream(ICameraStream):
    """
    Stream de cámara con OpenCV y un hilo lector.

    - El hilo lector deja sólo el frame más reciente en un slot (keep-latest);
      los frames que nadie leyó a tiempo se cierran y se pierden.
    - read_frame() espera (con timeout) a un frame NUEVO; nunca entrega dos veces el mismo.
    - Cada Frame lleva la rotación de montaje; el pipeline lo endereza.
    """

    def __init__(
        self,
        url: Union[str, int, None] = None,
        rotation_degrees: Optional[int] = None,
        reconnect_attempts: int = 3,
        fps_limit: float = 0.0,
    ):
        """
        :param url: URL RTSP/HTTP, ruta de video o índice de webcam ("0").
        :param rotation_degrees: 0/90/180/270, por defecto settings.camera_rotation.
        :param reconnect_attempts: Intentos seguidos antes de esperar y volver a empezar.
        :param fps_limit: Máx frames por segundo que entrega read_frame (0 = sin límite).
        """
        url = settings.camera_url if url is None else url
        self.url = int(url) if isinstance(url, str) and url.isdigit() else url
        self.camera_id = str(url)
        self.rotation_degrees = settings.camera_rotation if rotation_degrees is None else rotation_degrees
        self.reconnect_attempts = reconnect_attempts
        self.min_interval = 1.0 / fps_limit if fps_limit > 0 else 0.0

        self.cap = None
        self._slot: Optional[Frame] = None
        self._slot_ready = threading.Condition()
        self._last_delivery = 0.0
        self._running = threading.Event()
        self._reader: Optional[threading.Thread] = None

    # ---------------------------------------------------------
    # CONNECT / DISCONNECT
    # ---------------------------------------------------------
    def connect(self) -> None:
        self.cap = self._open_capture()
        if self.cap is None or not self.cap.isOpened():
            raise ConnectionError(f"No se pudo abrir el stream: {self.url}")

        logger.info(f"🎥 Conectado a {self.camera_id} (rotación={self.rotation_degrees}°)")

        self._running.set()
        self._reader = threading.Thread(
            target=self._reader_loop,
            name=f"reader-{self.camera_id}",
            daemon=True,
        )
        self._reader.start()

    def disconnect(self) -> None:
        self._running.clear()
        with self._slot_ready:
            self._slot_ready.notify_all()

        if self._reader and self._reader.is_alive():
            self._reader.join(timeout=2.0)

        if self.cap is not None:
            self.cap.release()
            self.cap = None

        with self._slot_ready:
            stale, self._slot = self._slot, None
        if stale is not None:
            stale.close()

        logger.info(f"🔌 Stream cerrado ({self.camera_id}).")

    def _open_capture(self):
        if isinstance(self.url, int):
            return cv2.VideoCapture(self.url)

        cap = cv2.VideoCapture(self.url, cv2.CAP_FFMPEG)
        if self.url.startswith("rtsp://"):
            # buffer mínimo para no acumular latencia
            cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        return cap

    # ---------------------------------------------------------
    # HILO LECTOR
    # ---------------------------------------------------------
    def _reader_loop(self):
        while self._running.is_set():
            ok, image = (False, None) if self.cap is None else self.cap.read()

            if not ok:
                logger.warning(f"[{self.camera_id}] Lectura fallida, reconectando...")
                if not self._reconnect():
                    time.sleep(1)
                continue

            frame = Frame(
                data=image,
                timestamp=time.time(),
                source=self.camera_id,
                rotation_degrees=self.rotation_degrees,
            )
            with self._slot_ready:
                dropped, self._slot = self._slot, frame
                self._slot_ready.notify_all()
            if dropped is not None:
                dropped.close()

        logger.info(f"[{self.camera_id}] Hilo lector terminado")

    def _reconnect(self) -> bool:
        if self.cap is not None:
            self.cap.release()
            self.cap = None

        for attempt in range(1, self.reconnect_attempts + 1):
            if not self._running.is_set():
                return False
            cap = self._open_capture()
            if cap is not None and cap.isOpened():
                self.cap = cap
                logger.info(f"[{self.camera_id}] Reconectado en el intento {attempt}.")
                return True
            logger.warning(f"[{self.camera_id}] Intento {attempt}/{self.reconnect_attempts} sin éxito")
            time.sleep(1)

        logger.error(f"[{self.camera_id}] No se pudo reconectar al stream.")
        return False

    # ---------------------------------------------------------
    # READ FRAME
    # ---------------------------------------------------------
    def read_frame(self, timeout: float = 1.0) -> Optional[Frame]:
        """
        Devuelve el frame más reciente o None si no llegó ninguno en `timeout`.
        Respeta fps_limit esperando lo que falte desde la última entrega.
        """
        wait = self._last_delivery + self.min_interval - time.monotonic()
        if wait > 0:
            if wait >= timeout:
                return None
            time.sleep(wait)
            timeout -= wait

        with self._slot_ready:
            if self._slot is None:
                self._slot_ready.wait(timeout=timeout)
            frame, self._slot = self._slot, None

        if frame is not None:
            self._last_delivery = time.monotonic()
        return frame

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.disconnect()
