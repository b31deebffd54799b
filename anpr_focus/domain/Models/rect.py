# anpr_focus/domain/Models/rect.py
from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """
    Rectángulo entero (left, top, right, bottom) en coordenadas de imagen.
    right/bottom son exclusivos, igual que en slicing de numpy.
    """
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center_x(self) -> int:
        return (self.left + self.right) // 2

    @property
    def center_y(self) -> int:
        return (self.top + self.bottom) // 2

    def offset(self, dx: int, dy: int) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.right + dx, self.bottom + dy)

    def contains(self, other: "Rect") -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and self.right >= other.right
            and self.bottom >= other.bottom
        )

    @staticmethod
    def from_points(points) -> "Rect":
        """Caja envolvente entera de una lista de puntos (x, y)."""
        xs = [int(round(float(p[0]))) for p in points]
        ys = [int(round(float(p[1]))) for p in points]
        return Rect(min(xs), min(ys), max(xs), max(ys))
