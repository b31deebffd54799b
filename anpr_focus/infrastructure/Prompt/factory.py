from anpr_focus.core.config import settings
from anpr_focus.domain.Interfaces.confirmation_prompt import IConfirmationPrompt
from anpr_focus.domain.Models.confirmation import OutcomeKind

def create_confirmation_prompt() -> IConfirmationPrompt:
    mode = settings.prompt_mode.lower()
    if mode == "console":
        from anpr_focus.infrastructure.Prompt.console_prompt import ConsoleConfirmationPrompt
        return ConsoleConfirmationPrompt()

    # "auto-accept", "auto-reject", ...
    from anpr_focus.infrastructure.Prompt.auto_prompt import AutoConfirmationPrompt
    kind = OutcomeKind.REJECTED if mode.endswith("reject") else OutcomeKind.ACCEPTED
    return AutoConfirmationPrompt(kind)
