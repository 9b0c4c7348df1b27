"""
Algoritmos de detección de nieve sobre imágenes en escala de grises.

Todas las funciones de este módulo son puras: no leen configuración global,
no escriben en disco y devuelven siempre el mismo resultado para las mismas
entradas.
"""
from typing import Tuple

import cv2
import numpy as np

from src.domain.schemas import ClassificationResult, DetectionOutcome, Polygon
from src.exceptions import SizeMismatchError

# Color BGR con el que se pintan los píxeles brillantes dentro de la región.
BRIGHT_COLOR_BGR = (0, 0, 255)


def build_mask(width: int, height: int, polygon: Polygon) -> np.ndarray:
    """
    Rasteriza el polígono como una máscara de un canal.

    Args:
        width (int): Ancho de la máscara en píxeles.
        height (int): Alto de la máscara en píxeles.
        polygon (Polygon): Región de interés en coordenadas de píxel.

    Returns:
        np.ndarray: Array uint8 de forma (alto, ancho) con 255 dentro del
        polígono y 0 fuera. Un polígono con menos de 3 vértices produce una
        máscara vacía.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Las dimensiones de la máscara deben ser positivas, se recibió {width}x{height}")

    mask = np.zeros((height, width), dtype=np.uint8)
    if len(polygon) < 3:
        return mask

    # cv2.fillPoly espera (N, 1, 2) en int32
    vertices = np.array(polygon.as_pairs(), dtype=np.int32).reshape((-1, 1, 2))
    cv2.fillPoly(mask, [vertices], color=255)
    return mask


def classify_brightness(
    grey: np.ndarray,
    mask: np.ndarray,
    brightness_threshold: int
) -> Tuple[ClassificationResult, np.ndarray]:
    """
    Clasifica cada píxel de la región como brillante o no brillante.

    Un píxel pertenece a la región si su valor en la máscara es distinto de 0,
    y es brillante si su gris es mayor o igual que `brightness_threshold`.

    Args:
        grey (np.ndarray): Imagen de un canal (alto, ancho), uint8.
        mask (np.ndarray): Máscara de las mismas dimensiones que `grey`.
        brightness_threshold (int): Umbral de luminancia, 0-255.

    Returns:
        Tuple[ClassificationResult, np.ndarray]: Los conteos y una imagen BGR
        de visualización donde los píxeles brillantes de la región aparecen
        en rojo puro y el resto conserva su gris.

    Raises:
        SizeMismatchError: Si `grey` y `mask` no comparten dimensiones.
    """
    if grey.shape != mask.shape:
        raise SizeMismatchError(
            f"Tamaños incompatibles: grey={grey.shape} ({grey.size} px), mask={mask.shape} ({mask.size} px)"
        )
    if not 0 <= brightness_threshold <= 255:
        raise ValueError(f"El umbral de brillo debe estar entre 0 y 255, se recibió {brightness_threshold}")

    inside = mask > 0
    bright = inside & (grey >= brightness_threshold)

    result = ClassificationResult(
        grand_total=int(grey.size),
        total_within_mask=int(np.count_nonzero(inside)),
        bright_within_mask=int(np.count_nonzero(bright)),
    )

    visualization = cv2.cvtColor(grey, cv2.COLOR_GRAY2BGR)
    visualization[bright] = BRIGHT_COLOR_BGR

    return result, visualization


def decide_snow(
    classification: ClassificationResult,
    snow_ratio_threshold: float,
    brightness_threshold: int
) -> DetectionOutcome:
    """
    Compara el ratio de píxeles brillantes con el umbral de nieve.

    Una región sin píxeles nunca reporta nieve, aunque el umbral sea 0.
    """
    ratio = classification.ratio
    observed = classification.total_within_mask > 0
    return DetectionOutcome(
        snow_detected=observed and ratio >= snow_ratio_threshold,
        ratio=ratio,
        snow_ratio_threshold=snow_ratio_threshold,
        brightness_threshold=brightness_threshold,
        classification=classification,
    )
