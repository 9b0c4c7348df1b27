"""
Persistencia opcional de las imágenes intermedias de cada ciclo.

Las imágenes se guardan como JPEG en una carpeta local, con nombres
`<timestamp>-<tipo>.jpg`, para depurar umbrales y la región de interés. Es
un canal de mejor esfuerzo: un fallo de escritura se registra en el log y
nunca afecta la detección ni el reporte.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import cv2
import numpy as np

from src.exceptions import FilesystemError
from src.nodes.base import PipelineNode


class LocalSnapshotStore:
    """
    Guarda artefactos de depuración en una carpeta del disco local.
    """
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        """
        Crea la carpeta de destino si no existe.

        Raises:
            FilesystemError: Si la carpeta no puede crearse.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"No se pudo crear la carpeta '{self.directory}': {e}") from e
        logging.info("Las capturas se guardarán en '%s'", self.directory)

    def write(self, filename: str, data: bytes) -> Path:
        """
        Escribe `data` en `<directory>/<filename>`.

        Raises:
            FilesystemError: Si la escritura falla.
        """
        path = self.directory / filename
        try:
            path.write_bytes(data)
        except OSError as e:
            raise FilesystemError(f"No se pudo escribir '{path}': {e}") from e
        return path


class NullSnapshotStore:
    """Almacén que descarta todo. Se usa cuando el guardado está desactivado."""

    def ensure_directory(self) -> None:
        pass

    def write(self, filename: str, data: bytes) -> Optional[Path]:
        return None


class SnapshotSaverNode(PipelineNode):
    """
    Codifica como JPEG una imagen del contexto y la entrega al almacén.
    """
    def __init__(
        self,
        store: Union[LocalSnapshotStore, NullSnapshotStore],
        input_key: str,
        label: str,
        jpeg_quality: int = 90,
        name: Optional[str] = None
    ):
        """
        Args:
            store: Almacén de destino.
            input_key (str): Clave del contexto con la imagen a guardar.
            label (str): Tipo de artefacto que forma parte del nombre del
                archivo (snapshot, greyscale, mask, bright).
            jpeg_quality (int): Calidad JPEG (0-100).
            name (Optional[str]): Nombre del nodo. Por defecto `save_<label>`.
        """
        super().__init__(name or f"save_{label}")
        self.store = store
        self.input_key = input_key
        self.label = label
        self.jpeg_quality = jpeg_quality

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """
        Context Inputs:
            - `timestamp` (str): Marca de tiempo del ciclo.
            - `context[self.input_key]` (np.ndarray): Imagen a guardar.

        Context Outputs:
            - `saved_snapshots[label]` (Path): Ruta escrita, si se guardó.
        """
        if isinstance(self.store, NullSnapshotStore):
            return context

        image = context.get(self.input_key)
        if image is None:
            logging.warning("[%s] No se encontró '%s' en el contexto. Omitiendo guardado.", self.name, self.input_key)
            return context

        filename = f"{context.get('timestamp', 'unknown')}-{self.label}.jpg"
        try:
            path = self.store.write(filename, self._encode(image))
        except (FilesystemError, cv2.error) as e:
            logging.error("[%s] Error al guardar la imagen '%s': %s", self.name, filename, e)
            return context

        logging.info("[%s] Imagen %s guardada en '%s'", self.name, self.label, path)
        context.setdefault('saved_snapshots', {})[self.label] = path
        return context

    def _encode(self, image: np.ndarray) -> bytes:
        ok, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality])
        if not ok:
            raise FilesystemError(f"OpenCV no pudo codificar '{self.input_key}' como JPEG.")
        return buffer.tobytes()
