import logging
from typing import Callable

from anpr_focus.domain.Interfaces.confirmation_prompt import IConfirmationPrompt
from anpr_focus.domain.Models.confirmation import ConfirmationOutcome, PromptRequest

logger = logging.getLogger(__name__)


class ConsoleConfirmationPrompt(IConfirmationPrompt):
    """
    Confirmación por consola: [a]ceptar, [r]echazar, [e]ditar, [c]ancelar.
    """

    def __init__(self, input_fn: Callable[[str], str] = input, output_fn: Callable[[str], None] = print):
        self._input = input_fn
        self._output = output_fn

    def ask(self, request: PromptRequest) -> ConfirmationOutcome:
        self._output(f"🔎 Placa detectada ({request.track.value}): {request.text}")
        try:
            answer = self._input("¿Confirmar? [a]ceptar / [r]echazar / [e]ditar / [c]ancelar: ").strip().lower()
        except EOFError:
            return ConfirmationOutcome.cancelled()

        if answer in ("a", "aceptar", "y", "yes", "s", "si"):
            return ConfirmationOutcome.accepted(request.text)
        if answer in ("r", "rechazar", "n", "no"):
            return ConfirmationOutcome.rejected()
        if answer in ("e", "editar", "edit"):
            try:
                edited = self._input(f"Texto correcto [{request.text}]: ")
            except EOFError:
                return ConfirmationOutcome.cancelled()
            return ConfirmationOutcome.edited(edited or request.text)
        return ConfirmationOutcome.cancelled()

    def show_notice(self, message: str) -> None:
        self._output(f"⚠️ {message}")
