"""
Nodos del pipeline que implementan la detección de nieve.

Este módulo encadena la conversión a escala de grises, la generación de la
máscara de la región de interés, la clasificación de brillo y la decisión
final. Los algoritmos viven en `src.domain.snow`; los nodos sólo los
conectan con el contexto del ciclo.
"""
import logging
from typing import Any, Dict

import cv2

from src.domain import Polygon
from src.domain.snow import build_mask, classify_brightness, decide_snow

from .base import PipelineNode


class GreyscaleNode(PipelineNode):
    """
    Convierte la captura BGR a un único canal de luminancia.
    """
    def __init__(self, name: str = "greyscale_node"):
        super().__init__(name)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Context Inputs:
            - `image` (np.ndarray): Captura BGR.

        Context Outputs:
            - `grey` (np.ndarray): Imagen (alto, ancho) en escala de grises.
        """
        image = self._require(context, 'image')
        logging.info("[%s] Generando imagen en escala de grises.", self.name)

        if image.ndim == 2:
            context['grey'] = image.copy()
        else:
            context['grey'] = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        return context


class PolygonMaskNode(PipelineNode):
    """
    Genera la máscara de la región de interés con las dimensiones reales de
    la captura del ciclo.
    """
    def __init__(self, polygon: Polygon, name: str = "mask_node"):
        """
        Args:
            polygon (Polygon): Región de interés en píxeles de la captura. Se
                usa tal cual, sin reescalar.
            name (str): Nombre del nodo.
        """
        super().__init__(name)
        self.polygon = polygon

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Context Inputs:
            - `original_shape` (tuple): Tupla (ancho, alto) de la captura.

        Context Outputs:
            - `mask` (np.ndarray): Máscara uint8, 255 dentro del polígono.
        """
        width, height = self._require(context, 'original_shape')
        logging.info("[%s] Creando máscara de %dx%d a partir de %d vértices.", self.name, width, height, len(self.polygon))

        context['mask'] = build_mask(width, height, self.polygon)
        return context


class BrightnessClassifierNode(PipelineNode):
    """
    Cuenta los píxeles de la región que superan el umbral de brillo.
    """
    def __init__(self, brightness_threshold: int, name: str = "brightness_node"):
        super().__init__(name)
        self.brightness_threshold = brightness_threshold

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Context Inputs:
            - `grey` (np.ndarray): Imagen en escala de grises.
            - `mask` (np.ndarray): Máscara de la región de interés.

        Context Outputs:
            - `classification` (ClassificationResult): Conteos de píxeles.
            - `bright_image` (np.ndarray): Visualización BGR con los píxeles
              brillantes de la región pintados de rojo.
        """
        grey = self._require(context, 'grey')
        mask = self._require(context, 'mask')
        logging.info("[%s] Calculando datos de brillo (umbral=%d).", self.name, self.brightness_threshold)

        classification, bright_image = classify_brightness(grey, mask, self.brightness_threshold)

        context['classification'] = classification
        context['bright_image'] = bright_image
        return context


class SnowDecisionNode(PipelineNode):
    """
    Decide si hay nieve comparando el ratio de píxeles brillantes con el umbral.
    """
    def __init__(self, snow_ratio_threshold: float, brightness_threshold: int, name: str = "decision_node"):
        super().__init__(name)
        self.snow_ratio_threshold = snow_ratio_threshold
        self.brightness_threshold = brightness_threshold

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        classification = self._require(context, 'classification')
        outcome = decide_snow(classification, self.snow_ratio_threshold, self.brightness_threshold)

        logging.info(
            "[%s] Conteo de píxeles total=%d dentro_de_mascara=%d brillantes=%d ratio=%.4f",
            self.name,
            classification.grand_total,
            classification.total_within_mask,
            classification.bright_within_mask,
            outcome.ratio
        )
        logging.info("[%s] Umbral de ratio=%s ===> nieve detectada = %s", self.name, self.snow_ratio_threshold, outcome.snow_detected)

        context['outcome'] = outcome
        return context
