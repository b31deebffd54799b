import logging
from typing import List

from anpr_focus.domain.Interfaces.confirmation_prompt import IConfirmationPrompt
from anpr_focus.domain.Models.confirmation import ConfirmationOutcome, OutcomeKind, PromptRequest

logger = logging.getLogger(__name__)


class AutoConfirmationPrompt(IConfirmationPrompt):
    """
    Implementación sin operador: responde siempre lo mismo.
    Útil en modo headless y en pruebas. Guarda las solicitudes y avisos.
    """

    def __init__(self, kind: OutcomeKind = OutcomeKind.ACCEPTED):
        self.kind = kind
        self.requests: List[PromptRequest] = []
        self.notices: List[str] = []

    def ask(self, request: PromptRequest) -> ConfirmationOutcome:
        self.requests.append(request)
        logger.info("Auto-confirmación (%s) para %s", self.kind.value, request.text)
        if self.kind is OutcomeKind.ACCEPTED:
            return ConfirmationOutcome.accepted(request.text)
        if self.kind is OutcomeKind.REJECTED:
            return ConfirmationOutcome.rejected()
        return ConfirmationOutcome.cancelled()

    def show_notice(self, message: str) -> None:
        self.notices.append(message)
        logger.warning(message)
