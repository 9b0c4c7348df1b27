"""
Nodo que publica el resultado de la detección en Home Assistant.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from src.domain import DetectionOutcome
from src.exceptions import TransportError
from src.nodes.base import PipelineNode


class HomeAssistantStateNode(PipelineNode):
    """
    Actualiza el estado de una entidad binaria de Home Assistant con el
    resultado del ciclo ("on" si hay nieve, "off" si no).

    Un fallo de comunicación se registra y no se reintenta: el siguiente
    ciclo volverá a enviar el estado.
    """

    def __init__(self,
                 client: httpx.Client,
                 base_url: Optional[str],
                 token: Optional[str],
                 entity_id: Optional[str],
                 dry_run: bool = False,
                 input_key: str = "outcome",
                 name: str = "home_assistant"):
        super().__init__(name)
        self.client = client
        self.base_url = base_url.rstrip("/") if base_url else base_url
        self.token = token
        self.entity_id = entity_id
        self.dry_run = dry_run
        self.input_key = input_key

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/states/{self.entity_id}"

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        outcome: DetectionOutcome = context.get(self.input_key)
        context['report_sent'] = False

        if outcome is None:
            logging.warning("[%s] No hay datos en '%s'. Se omite el envío.", self.name, self.input_key)
            return context

        if self.dry_run:
            logging.info("[%s] Modo dry-run: no se actualiza Home Assistant (estado=%s).", self.name, outcome.state)
            return context

        logging.info("[%s] Actualizando HA @ '%s' ===> %s", self.name, self.url, outcome.state)
        try:
            self.send_state(outcome.state)
            context['report_sent'] = True
        except TransportError as e:
            logging.error("[%s] Error al actualizar Home Assistant: %s", self.name, e)

        return context

    def send_state(self, state: str) -> None:
        """
        Envía `{"state": state}` a la API REST de Home Assistant.

        Raises:
            TransportError: Si la petición falla o la respuesta no es 2xx.
        """
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        try:
            response = self.client.post(self.url, headers=headers, json={"state": state})
        except (httpx.HTTPError, httpx.InvalidURL, httpx.CookieConflict, UnicodeEncodeError) as e:
            raise TransportError(f"Fallo al actualizar HA: {e}", url=self.url) from e

        if not response.is_success:
            raise TransportError(
                f"Actualización de HA fallida: {response.status_code} {response.reason_phrase} - {response.text}",
                url=self.url,
                status_code=response.status_code
            )
