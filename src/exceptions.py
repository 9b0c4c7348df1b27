"""
Jerarquía de excepciones del servicio de detección de nieve.

Cada clase corresponde a una categoría de fallo con una política de
propagación distinta (ver `SnowDetectionPipeline.run_cycle` y `main.py`).
"""
from typing import Optional


class SnowDetectionError(Exception):
    """Excepción base para todos los errores del servicio."""


class ConfigurationError(SnowDetectionError):
    """Configuración ausente o inválida. Impide que el servicio arranque."""


class TransportError(SnowDetectionError):
    """
    Fallo de comunicación HTTP con la cámara o con Home Assistant.

    Attributes:
        url (str): URL contra la que se realizó la petición.
        status_code (Optional[int]): Código HTTP recibido, o None si la
            petición no llegó a obtener respuesta (timeout, conexión, etc.).
    """
    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class SizeMismatchError(SnowDetectionError):
    """La imagen en escala de grises y la máscara no tienen las mismas dimensiones."""


class FilesystemError(SnowDetectionError):
    """No se pudo escribir un artefacto de depuración en disco."""
