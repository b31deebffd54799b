# anpr_focus/domain/errors.py


class InvalidPlateTextError(ValueError):
    """
    Texto de placa inválido tras sanitizar (longitud fuera de rango).
    Lo lanza la confirmación al editar; el texto no se confirma.
    """

    def __init__(self, text: str, min_len: int, max_len: int):
        super().__init__(f"Placa inválida '{text}': se esperaban {min_len}-{max_len} caracteres")
        self.text = text
        self.min_len = min_len
        self.max_len = max_len
