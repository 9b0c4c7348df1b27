"""
Define los esquemas geométricos de la región de interés observada.
"""
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple


@dataclass(frozen=True)
class Point:
    """
    Un punto en coordenadas de píxel de la imagen de la cámara.

    Attributes:
        x (int): Columna del píxel (0 = borde izquierdo).
        y (int): Fila del píxel (0 = borde superior).
    """
    x: int
    y: int

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Polygon:
    """
    Polígono cerrado que delimita la zona donde se busca nieve.

    El orden de los vértices es significativo: define qué puntos quedan
    unidos por una arista. No se exige que el polígono sea convexo.

    Las coordenadas se expresan en el mismo espacio de píxeles que la
    captura de la cámara y se usan tal cual; si la resolución de la cámara
    cambia, el polígono debe reconfigurarse.

    Attributes:
        points (Tuple[Point, ...]): Vértices en orden.
    """
    points: Tuple[Point, ...]

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[int]]) -> "Polygon":
        return cls(points=tuple(Point(int(x), int(y)) for x, y in pairs))

    def as_pairs(self) -> Tuple[Tuple[int, int], ...]:
        return tuple(p.as_tuple() for p in self.points)

    def __len__(self) -> int:
        return len(self.points)
