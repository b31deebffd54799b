from abc import ABC, abstractmethod

from anpr_focus.domain.Models.confirmation import ConfirmationOutcome, PromptRequest


class IConfirmationPrompt(ABC):
    """
    UI de confirmación: aceptar / rechazar / editar una placa candidata.
    """
    @abstractmethod
    def ask(self, request: PromptRequest) -> ConfirmationOutcome:
        """Bloquea hasta que el operador responde."""
        pass

    @abstractmethod
    def show_notice(self, message: str) -> None:
        """Aviso visible al operador (p.ej. texto editado inválido)."""
        pass
