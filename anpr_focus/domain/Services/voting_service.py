# anpr_focus/domain/Services/voting_service.py
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Tuple

from anpr_focus.core.config import settings
from anpr_focus.domain.errors import InvalidPlateTextError
from anpr_focus.domain.Interfaces.text_normalizer import ITextNormalizer
from anpr_focus.domain.Models.confirmation import (
    CandidateState,
    ConfirmationOutcome,
    OutcomeKind,
    PromptRequest,
    PromptTrack,
)
from anpr_focus.domain.Models.plate import PlateDetection, WindowPlateEntry
from anpr_focus.domain.Models.zoom_result import ZoomResult
from anpr_focus.domain.Services.plate_filter import compute_center_distance
from anpr_focus.domain.Services.plate_registry import PlateRegistry
from anpr_focus.infrastructure.Imaging.image_ops import placeholder_image

logger = logging.getLogger(__name__)


def _rank_key(item: Tuple[str, WindowPlateEntry]) -> Tuple[int, float, str]:
    # más votos primero, luego más centrado, luego orden alfabético
    text, entry = item
    return (-entry.count, entry.center_distance, text)


class VotingService:
    """
    Votación temporal y confirmación de placas.

    Dos pistas independientes alimentan el mismo registro:
        1) ventana (búsqueda ROI): votos por texto dentro de una ventana que
           se evalúa y limpia periódicamente (evaluate_window).
        2) algoritmo (frame completo): contador por texto; al llegar al umbral
           se pide confirmación una sola vez.

    Estados por texto: UNSEEN -> VOTING -> PROMPT_PENDING -> {CONFIRMED, UNSEEN}.

    Todo el estado vive aquí detrás de un único lock; el worker de frames y el
    timer de ventana comparten la misma instancia. Cada pista tiene como mucho
    una solicitud de confirmación abierta (single-flight).
    """

    def __init__(
        self,
        registry: PlateRegistry,
        normalizer: ITextNormalizer,
        confirmation_threshold: Optional[int] = None,
        algorithm_confirmation_threshold: Optional[int] = None,
    ):
        self.registry = registry
        self.normalizer = normalizer
        self.confirmation_threshold = (
            confirmation_threshold if confirmation_threshold is not None else settings.confirmation_threshold
        )
        self.algorithm_confirmation_threshold = (
            algorithm_confirmation_threshold
            if algorithm_confirmation_threshold is not None
            else settings.algorithm_confirmation_threshold
        )

        self._lock = threading.RLock()
        # pista ventana
        self._window: Dict[str, WindowPlateEntry] = {}
        # pista algoritmo
        self._algorithm_counts: Dict[str, int] = {}
        self._algorithm_prompted: set[str] = set()
        # solicitudes abiertas (una por pista)
        self._pending: Dict[PromptTrack, Optional[PromptRequest]] = {
            PromptTrack.WINDOW: None,
            PromptTrack.ALGORITHM: None,
        }

    # ---------------------------------------------------------
    #  PISTA VENTANA
    # ---------------------------------------------------------
    def add_zoom_result(self, result: ZoomResult) -> Optional[PromptRequest]:
        detection = PlateDetection(
            text=result.text,
            area=result.area,
            image=result.image,
            rect=result.rect,
            center_distance=compute_center_distance(result.rect, result.frame_width, result.frame_height),
        )
        return self.add_detection(detection)

    def add_detection(self, detection: PlateDetection) -> Optional[PromptRequest]:
        """Suma un voto y devuelve una solicitud de confirmación si toca."""
        text = detection.text.strip()
        if not text or not self.normalizer.is_valid_length(text):
            return None

        with self._lock:
            entry = self._window.setdefault(text, WindowPlateEntry())
            entry.count += 1
            if detection.area > entry.best_area or entry.image is None:
                entry.best_area = max(entry.best_area, detection.area)
                entry.image = detection.image
            entry.center_distance = min(entry.center_distance, detection.center_distance)

            return self._maybe_prompt_window()

    def evaluate_window(self) -> Optional[str]:
        """
        Cierra la ventana actual: el texto con más votos (y longitud válida)
        se ofrece al registro. La ventana se limpia siempre.
        """
        with self._lock:
            eligible = [
                (text, entry)
                for text, entry in self._window.items()
                if self.normalizer.is_valid_length(text)
            ]
            winner: Optional[str] = None
            if eligible:
                winner, entry = min(eligible, key=_rank_key)
                if entry.image is not None:
                    self.registry.insert_or_update(winner, entry.best_area, entry.image)
            self._window.clear()
            return winner

    def _maybe_prompt_window(self) -> Optional[PromptRequest]:
        if self._pending[PromptTrack.WINDOW] is not None:
            return None

        candidates = [
            (text, entry)
            for text, entry in self._window.items()
            if entry.count >= self.confirmation_threshold
            and entry.image is not None
            and not self.registry.is_confirmed(text)
        ]
        if not candidates:
            return None

        text, entry = min(candidates, key=_rank_key)
        request = PromptRequest(
            track=PromptTrack.WINDOW,
            text=text,
            display_text=text,
            area=entry.best_area,
            image=entry.image,
        )
        self._pending[PromptTrack.WINDOW] = request
        logger.info("Solicitando confirmación (ventana) para %s con %d votos", text, entry.count)
        return request

    # ---------------------------------------------------------
    #  PISTA ALGORITMO
    # ---------------------------------------------------------
    def register_algorithm_result(self, raw_result: Optional[str]) -> Optional[PromptRequest]:
        if raw_result is None or not raw_result.strip():
            return None
        sanitized = self.normalizer.sanitize(raw_result)
        if not sanitized:
            return None

        with self._lock:
            if self.registry.is_confirmed(sanitized):
                self._reset_algorithm(sanitized)
                return None
            if not self.normalizer.is_valid_length(sanitized):
                return None

            count = self._algorithm_counts.get(sanitized, 0) + 1
            self._algorithm_counts[sanitized] = count

            if (
                count >= self.algorithm_confirmation_threshold
                and sanitized not in self._algorithm_prompted
                and self._pending[PromptTrack.ALGORITHM] is None
            ):
                self._algorithm_prompted.add(sanitized)
                request = PromptRequest(
                    track=PromptTrack.ALGORITHM,
                    text=sanitized,
                    display_text=raw_result,
                )
                self._pending[PromptTrack.ALGORITHM] = request
                logger.info("Solicitando confirmación (algoritmo) para %s tras %d lecturas", sanitized, count)
                return request
            return None

    # ---------------------------------------------------------
    #  RESOLUCIÓN DE CONFIRMACIONES
    # ---------------------------------------------------------
    def resolve(self, request: PromptRequest, outcome: ConfirmationOutcome) -> Optional[str]:
        """
        Aplica la respuesta del operador.
        Devuelve el texto confirmado o None. Lanza InvalidPlateTextError si el
        texto editado no es válido (la pista queda libre igualmente).
        """
        with self._lock:
            try:
                if request.track is PromptTrack.WINDOW:
                    return self._resolve_window(request, outcome)
                return self._resolve_algorithm(request, outcome)
            finally:
                if self._pending[request.track] is request:
                    self._pending[request.track] = None

    def release(self, request: PromptRequest) -> None:
        """Libera la pista sin aplicar respuesta (prompt que no llegó a mostrarse)."""
        with self._lock:
            if self._pending[request.track] is request:
                self._pending[request.track] = None

    def _resolve_window(self, request: PromptRequest, outcome: ConfirmationOutcome) -> Optional[str]:
        image = request.image if request.image is not None else placeholder_image()

        if outcome.kind is OutcomeKind.ACCEPTED:
            self._confirm(request.text, request.area, image)
            return request.text

        if outcome.kind is OutcomeKind.EDITED:
            edited = self._validated_edit(outcome.text)
            self._confirm(edited, request.area, image)
            if edited != request.text:
                self._clear_candidate(request.text)
            return edited

        # rechazado / cancelado: vuelve a UNSEEN para poder re-acumular votos
        self._clear_candidate(request.text)
        return None

    def _resolve_algorithm(self, request: PromptRequest, outcome: ConfirmationOutcome) -> Optional[str]:
        if outcome.kind is OutcomeKind.ACCEPTED:
            self._confirm(request.text, 0, placeholder_image())
            return request.text

        if outcome.kind is OutcomeKind.EDITED:
            self._reset_algorithm(request.text)
            edited = self._validated_edit(outcome.text)
            self._confirm(edited, 0, placeholder_image())
            return edited

        self._reset_algorithm(request.text)
        return None

    def _validated_edit(self, text: Optional[str]) -> str:
        edited = self.normalizer.sanitize(text)
        if not self.normalizer.is_valid_length(edited):
            raise InvalidPlateTextError(edited, self.normalizer.min_len, self.normalizer.max_len)
        return edited

    def _confirm(self, text: str, area: int, image) -> None:
        self.registry.confirm(text)
        self.registry.insert_or_update(text, area, image)
        self._reset_algorithm(text)
        logger.info("Placa confirmada: %s", text)

    # ---------------------------------------------------------
    #  RESET / BORRADO
    # ---------------------------------------------------------
    def remove_plate(self, text: str) -> bool:
        """Borra la placa del registro y la devuelve a UNSEEN."""
        with self._lock:
            removed = self.registry.remove(text)
            self._clear_candidate(text)
            return removed

    def _reset_algorithm(self, text: str) -> None:
        self._algorithm_counts.pop(text, None)
        self._algorithm_prompted.discard(text)

    def _clear_candidate(self, text: str) -> None:
        self._window.pop(text, None)
        self._reset_algorithm(text)

    # ---------------------------------------------------------
    #  CONSULTAS
    # ---------------------------------------------------------
    def candidate_state(self, text: str) -> CandidateState:
        with self._lock:
            if self.registry.is_confirmed(text):
                return CandidateState.CONFIRMED
            if any(req is not None and req.text == text for req in self._pending.values()):
                return CandidateState.PROMPT_PENDING
            if text in self._window or text in self._algorithm_counts:
                return CandidateState.VOTING
            return CandidateState.UNSEEN

    def prompt_pending(self, track: PromptTrack) -> bool:
        with self._lock:
            return self._pending[track] is not None

    def window_counts(self) -> Dict[str, int]:
        with self._lock:
            return {text: entry.count for text, entry in self._window.items()}

    def algorithm_count(self, text: str) -> int:
        with self._lock:
            return self._algorithm_counts.get(text, 0)

    def ranking(self) -> List[Tuple[str, int]]:
        """Textos de la ventana actual ordenados por votos y cercanía al centro."""
        with self._lock:
            return [(text, entry.count) for text, entry in sorted(self._window.items(), key=_rank_key)]
