"""
Define los esquemas de datos que encapsulan el resultado de una detección
de nieve.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class ClassificationResult:
    """
    Conteo de píxeles producido por el clasificador de brillo.

    Garantiza `0 <= bright_within_mask <= total_within_mask <= grand_total`.

    Attributes:
        grand_total (int): Número total de píxeles de la imagen (ancho * alto).
        total_within_mask (int): Píxeles dentro de la región de interés.
        bright_within_mask (int): Píxeles dentro de la región cuyo valor de
            gris alcanza el umbral de brillo.
    """
    grand_total: int
    total_within_mask: int
    bright_within_mask: int

    @property
    def ratio(self) -> float:
        """
        Fracción de píxeles brillantes dentro de la región.

        Si la región no contiene píxeles el ratio es 0: sin región observada
        no se reporta nieve.
        """
        if self.total_within_mask == 0:
            return 0.0
        return self.bright_within_mask / self.total_within_mask


@dataclass(frozen=True)
class DetectionOutcome:
    """
    Resultado final de un ciclo de detección.

    Attributes:
        snow_detected (bool): True si el ratio alcanza el umbral configurado.
        ratio (float): Fracción de píxeles brillantes dentro de la región.
        snow_ratio_threshold (float): Umbral de ratio usado en la decisión.
        brightness_threshold (int): Umbral de gris usado en la clasificación.
        classification (ClassificationResult): Conteos que originaron el ratio.
    """
    snow_detected: bool
    ratio: float
    snow_ratio_threshold: float
    brightness_threshold: int
    classification: ClassificationResult

    @property
    def state(self) -> str:
        """Estado en el formato de una entidad binaria de Home Assistant."""
        return "on" if self.snow_detected else "off"
