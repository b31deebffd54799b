# anpr_focus/domain/Models/confirmation.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class PromptTrack(str, Enum):
    WINDOW = "window"         # votos de la búsqueda ROI
    ALGORITHM = "algorithm"   # selección por frame completo


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EDITED = "edited"
    CANCELLED = "cancelled"


class CandidateState(str, Enum):
    UNSEEN = "unseen"
    VOTING = "voting"
    PROMPT_PENDING = "prompt_pending"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class ConfirmationOutcome:
    """
    Respuesta del operador a una solicitud de confirmación.
    text sólo aplica a ACCEPTED (texto mostrado) y EDITED (texto re-escrito).
    """
    kind: OutcomeKind
    text: Optional[str] = None

    @staticmethod
    def accepted(text: Optional[str] = None) -> "ConfirmationOutcome":
        return ConfirmationOutcome(OutcomeKind.ACCEPTED, text)

    @staticmethod
    def rejected() -> "ConfirmationOutcome":
        return ConfirmationOutcome(OutcomeKind.REJECTED)

    @staticmethod
    def edited(text: str) -> "ConfirmationOutcome":
        return ConfirmationOutcome(OutcomeKind.EDITED, text)

    @staticmethod
    def cancelled() -> "ConfirmationOutcome":
        return ConfirmationOutcome(OutcomeKind.CANCELLED)


@dataclass(frozen=True, eq=False)
class PromptRequest:
    """
    Solicitud de confirmación emitida por la máquina de votación.
    """
    track: PromptTrack
    text: str                      # texto sanitizado
    display_text: str              # lo que se le muestra al operador
    area: int = 0
    image: Optional[np.ndarray] = None
