# anpr_focus/domain/Models/text_line.py
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from anpr_focus.domain.Models.rect import Rect

Point = Tuple[float, float]


@dataclass(frozen=True)
class TextLine:
    """
    Una línea de texto devuelta por el detector externo.
    bounding_box en coordenadas de la imagen que se le pasó al detector.
    """
    text: str
    bounding_box: Optional[Rect] = None
    corner_points: Tuple[Point, ...] = ()   # sentido horario desde arriba-izquierda


@dataclass
class TextDetection:
    """
    Resultado completo de una llamada al detector.
    """
    lines: List[TextLine] = field(default_factory=list)
    text: str = ""   # texto crudo completo tal cual lo devuelve el servicio

    @staticmethod
    def from_lines(lines: List[TextLine]) -> "TextDetection":
        return TextDetection(lines=list(lines), text="\n".join(l.text for l in lines))
