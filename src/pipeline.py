"""
Define el pipeline de detección de nieve, que orquesta la secuencia de pasos
de un ciclo.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import httpx

from config.settings import Settings
from src.domain import DetectionOutcome
from src.nodes.base import PipelineNode
from src.nodes.camera import SnapshotDownloaderNode
from src.nodes.home_assistant import HomeAssistantStateNode
from src.nodes.snapshots import LocalSnapshotStore, NullSnapshotStore, SnapshotSaverNode
from src.nodes.snow import (BrightnessClassifierNode, GreyscaleNode,
                            PolygonMaskNode, SnowDecisionNode)


class SnowDetectionPipeline:
    """
    Orquesta la ejecución de un ciclo de detección de nieve.

    Se instancia una vez al inicio del servicio (ver `main.py`) y reutiliza
    los clientes HTTP y el almacén de capturas, recibidos por inyección de
    dependencias. Cada ciclo parte de un contexto nuevo: nada de lo producido
    en un ciclo se conserva para el siguiente.

    El orden de los pasos es fijo: captura, escala de grises, máscara,
    clasificación, decisión y reporte. Tras cada paso que produce una imagen
    se intercala un nodo que la guarda en el almacén de depuración.
    """
    def __init__(self,
                 settings: Settings,
                 camera_client: httpx.Client,
                 ha_client: httpx.Client,
                 snapshot_store: Optional[Union[LocalSnapshotStore, NullSnapshotStore]] = None):
        """
        Inicializa el pipeline.

        Args:
            settings (Settings): Configuración validada del servicio.
            camera_client (httpx.Client): Cliente HTTP para la cámara.
            ha_client (httpx.Client): Cliente HTTP para Home Assistant.
            snapshot_store: Almacén de imágenes de depuración. Si es None no
                se guarda nada.
        """
        self.settings = settings
        self.camera_client = camera_client
        self.ha_client = ha_client
        self.snapshot_store = snapshot_store or NullSnapshotStore()

        self.nodes: List[PipelineNode] = self._build_pipeline()
        logging.info("Pipeline de detección de nieve construido con %d nodos.", len(self.nodes))

    def _build_pipeline(self) -> List[PipelineNode]:
        settings = self.settings
        store = self.snapshot_store
        return [
            # 1. Descargar la captura de la cámara.
            SnapshotDownloaderNode(
                client=self.camera_client,
                url=settings.snapshot_url,
                username=settings.snapshot_username,
                password=settings.snapshot_password,
                name="Snapshot"
            ),
            SnapshotSaverNode(store, input_key="image", label="snapshot"),
            # 2. Convertir a escala de grises.
            GreyscaleNode(name="Greyscale"),
            SnapshotSaverNode(store, input_key="grey", label="greyscale"),
            # 3. Rasterizar el polígono con el tamaño real de la captura.
            PolygonMaskNode(polygon=settings.polygon, name="Mask"),
            SnapshotSaverNode(store, input_key="mask", label="mask"),
            # 4. Contar píxeles brillantes dentro de la región.
            BrightnessClassifierNode(
                brightness_threshold=settings.brightness_threshold,
                name="Brightness"
            ),
            SnapshotSaverNode(store, input_key="bright_image", label="bright"),
            # 5. Comparar el ratio con el umbral de nieve.
            SnowDecisionNode(
                snow_ratio_threshold=settings.snow_ratio_threshold,
                brightness_threshold=settings.brightness_threshold,
                name="Decision"
            ),
            # 6. Reportar el estado a Home Assistant.
            HomeAssistantStateNode(
                client=self.ha_client,
                base_url=settings.ha_url,
                token=settings.ha_token,
                entity_id=settings.ha_entity_id,
                dry_run=settings.dry_run,
                name="HomeAssistant"
            ),
        ]

    def run(self, initial_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Ejecuta la secuencia completa de nodos.

        Args:
            initial_context (Optional[Dict[str, Any]]): Contexto inicial. Si no
                trae `timestamp` se genera uno con la hora actual (UTC).

        Returns:
            Dict[str, Any]: El contexto final, con el `outcome` del ciclo y los
            tiempos de ejecución de cada nodo.

        Raises:
            Exception: Si cualquier nodo falla, la excepción se propaga.
        """
        context = dict(initial_context or {})
        context.setdefault('timestamp', cycle_timestamp())
        context['execution_times'] = {}

        cycle_id = context['timestamp']
        logging.info(">>> Detección de nieve iniciada (ciclo %s)", cycle_id)

        total_start_time = time.perf_counter()

        for node in self.nodes:
            node_start_time = time.perf_counter()
            try:
                context = node.run(context)
                context['execution_times'][node.name] = time.perf_counter() - node_start_time

            except Exception as e:
                logging.error(
                    "!!! Error en nodo '%s' (ciclo %s): %s",
                    node.name, cycle_id, e
                )
                raise

        total_duration = time.perf_counter() - total_start_time
        context['execution_times']['total_pipeline'] = total_duration

        logging.info("<<< Detección de nieve completada (ciclo %s) en %.4f segundos.", cycle_id, total_duration)
        self._log_execution_times(cycle_id, context['execution_times'])

        return context

    def _log_execution_times(self, cycle_id: str, times: Dict[str, float]):
        total = times.get('total_pipeline', 0)

        log_msg = [f"📊 TIEMPOS - CICLO {cycle_id} (Total: {total:.4f}s)"]
        nodes = {k: v for k, v in times.items() if k != 'total_pipeline'}
        for node, dur in nodes.items():
            pct = (dur / total * 100) if total > 0 else 0
            log_msg.append(f"   • {node:<15}: {dur:.4f}s ({pct:.1f}%)")

        logging.info("\n".join(log_msg))

    def run_cycle(self) -> Optional[DetectionOutcome]:
        """
        Ejecuta un ciclo sin propagar excepciones.

        Returns:
            Optional[DetectionOutcome]: El resultado del ciclo, o None si algún
            paso anterior al reporte falló. En ese caso no se envía nada a
            Home Assistant.
        """
        try:
            context = self.run()
        except Exception as e:
            logging.error("El ciclo de detección falló: %s", e, exc_info=True)
            return None
        return context.get('outcome')


def cycle_timestamp(now: Optional[datetime] = None) -> str:
    """
    Marca de tiempo apta para nombres de archivo, p. ej.
    `2026-01-15T07-30-00-123Z`.
    """
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
