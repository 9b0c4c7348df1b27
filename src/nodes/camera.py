"""
Nodo del pipeline que obtiene la captura de la cámara IP.
"""
import logging
from typing import Any, Dict

import cv2
import httpx
import numpy as np

from src.exceptions import TransportError
from src.nodes.base import PipelineNode


class SnapshotDownloaderNode(PipelineNode):
    """
    Descarga una imagen fija de la cámara usando autenticación HTTP digest y
    la decodifica como un array de OpenCV.
    """
    def __init__(
        self,
        client: httpx.Client,
        url: str,
        username: str,
        password: str,
        output_key: str = "image",
        name: str = "snapshot_downloader"
    ):
        """
        Inicializa el nodo de descarga.

        Args:
            client (httpx.Client): Cliente HTTP compartido, ya configurado con
                el timeout deseado.
            url (str): URL de la captura de la cámara.
            username (str): Usuario para el desafío digest.
            password (str): Contraseña para el desafío digest.
            output_key (str): Clave del contexto donde se guarda la imagen.
            name (str): Nombre del nodo.
        """
        super().__init__(name)
        self.client = client
        self.url = url
        self.auth = httpx.DigestAuth(username, password)
        self.output_key = output_key

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Descarga y decodifica la captura.

        Context Outputs:
            - `snapshot_bytes` (bytes): Los bytes tal como los entregó la cámara.
            - `context[self.output_key]` (np.ndarray): Imagen BGR decodificada.
            - `original_shape` (tuple): Tupla (ancho, alto) de la imagen.

        Raises:
            TransportError: Si la petición falla o la respuesta no es 2xx.
            ValueError: Si los bytes recibidos no son una imagen válida.
        """
        logging.info("[%s] Descargando captura desde '%s'", self.name, self.url)
        image_bytes = self._fetch()
        if not image_bytes:
            raise ValueError(f"[{self.name}] La cámara devolvió una respuesta vacía desde '{self.url}'.")

        image = cv2.imdecode(np.frombuffer(image_bytes, np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            raise ValueError(f"[{self.name}] OpenCV no pudo decodificar los {len(image_bytes)} bytes recibidos de '{self.url}'.")

        h, w = image.shape[:2]
        context['snapshot_bytes'] = image_bytes
        context[self.output_key] = image
        context['original_shape'] = (w, h)
        logging.info("[%s] Captura recibida y decodificada (%dx%d).", self.name, w, h)

        return context

    def _fetch(self) -> bytes:
        try:
            response = self.client.get(self.url, auth=self.auth)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logging.error("[%s] La cámara respondió %s %s", self.name, status_code, e.response.reason_phrase)
            raise TransportError(
                f"Fallo al obtener la captura de '{self.url}': {status_code} {e.response.reason_phrase}",
                url=self.url,
                status_code=status_code
            ) from e
        except httpx.HTTPError as e:
            logging.error("[%s] Error de red al contactar la cámara: %s", self.name, e)
            raise TransportError(f"Fallo al obtener la captura de '{self.url}': {e}", url=self.url) from e

        return response.content
