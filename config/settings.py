"""
Carga y valida la configuración del servicio desde variables de entorno.

La configuración se lee una única vez al arrancar (ver `main.py`) y se
entrega como un objeto inmutable a cada componente que la necesita.
"""
import json
import math
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from shapely.geometry import Polygon as ShapelyPolygon

from src.domain import Polygon
from src.exceptions import ConfigurationError

DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    """
    Configuración completa del servicio de detección de nieve.

    Attributes:
        snapshot_logging_enabled (bool): Si es True se guardan en disco las
            imágenes intermedias de cada ciclo.
        dry_run (bool): Si es True no se actualiza Home Assistant.
        snapshot_dir (Optional[str]): Carpeta donde se guardan las imágenes
            de depuración. Obligatoria si `snapshot_logging_enabled`.
        snapshot_url (str): URL de la captura JPEG de la cámara.
        snapshot_username (str): Usuario para la autenticación digest.
        snapshot_password (str): Contraseña para la autenticación digest.
        polygon (Polygon): Región de interés en píxeles de la captura.
        brightness_threshold (int): Umbral de luminancia por píxel (0-255).
        snow_ratio_threshold (float): Fracción mínima de píxeles brillantes
            para considerar que hay nieve (0-1).
        ha_url (Optional[str]): URL base de Home Assistant.
        ha_token (Optional[str]): Token de larga duración de Home Assistant.
        ha_entity_id (Optional[str]): Entidad que recibe el estado.
        check_interval_minutes (float): Periodo entre ciclos.
        http_timeout_seconds (float): Timeout de cada petición HTTP.
        log_level (str): Nivel de logging.
    """
    snapshot_logging_enabled: bool
    dry_run: bool
    snapshot_dir: Optional[str]
    snapshot_url: str
    snapshot_username: str
    snapshot_password: str
    polygon: Polygon
    brightness_threshold: int
    snow_ratio_threshold: float
    ha_url: Optional[str]
    ha_token: Optional[str]
    ha_entity_id: Optional[str]
    check_interval_minutes: float
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Construye `Settings` a partir de las variables de entorno.

    Si no se entrega `environ` se carga primero el archivo `.env` (si existe)
    y se usa `os.environ`.

    Raises:
        ConfigurationError: Si falta un valor obligatorio o alguno es inválido.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    snapshot_logging_enabled = _parse_bool(environ, "SNAPSHOT_LOGGING_ENABLED")
    dry_run = _parse_bool(environ, "DRY_RUN_SKIP_HA_UPDATE")

    snapshot_dir = _get(environ, "SNAPSHOT_DIR")
    if snapshot_logging_enabled and not snapshot_dir:
        raise ConfigurationError("SNAPSHOT_DIR es obligatorio cuando SNAPSHOT_LOGGING_ENABLED=true")

    snapshot_url = _require(environ, "SNAPSHOT_URL")
    _validate_url("SNAPSHOT_URL", snapshot_url)

    ha_url = _get(environ, "HA_URL")
    ha_token = _get(environ, "HA_TOKEN")
    ha_entity_id = _get(environ, "HA_ENTITY_ID")
    if not dry_run:
        ha_url = _require(environ, "HA_URL")
        ha_token = _require(environ, "HA_TOKEN")
        ha_entity_id = _require(environ, "HA_ENTITY_ID")
        _validate_url("HA_URL", ha_url)

    brightness_threshold = _parse_int(environ, "BRIGHTNESS_THRESHOLD")
    if not 0 <= brightness_threshold <= 255:
        raise ConfigurationError(f"BRIGHTNESS_THRESHOLD debe estar entre 0 y 255, se recibió {brightness_threshold}")

    snow_ratio_threshold = _parse_float(environ, "SNOW_RATIO_THRESHOLD")
    if not 0.0 <= snow_ratio_threshold <= 1.0:
        raise ConfigurationError(f"SNOW_RATIO_THRESHOLD debe estar entre 0 y 1, se recibió {snow_ratio_threshold}")

    check_interval_minutes = _parse_float(environ, "CHECK_INTERVAL_MINUTES")
    if check_interval_minutes <= 0:
        raise ConfigurationError(f"CHECK_INTERVAL_MINUTES debe ser positivo, se recibió {check_interval_minutes}")

    http_timeout_seconds = DEFAULT_HTTP_TIMEOUT_SECONDS
    if _get(environ, "HTTP_TIMEOUT_SECONDS"):
        http_timeout_seconds = _parse_float(environ, "HTTP_TIMEOUT_SECONDS")
        if http_timeout_seconds <= 0:
            raise ConfigurationError(f"HTTP_TIMEOUT_SECONDS debe ser positivo, se recibió {http_timeout_seconds}")

    log_level = (_get(environ, "LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"LOG_LEVEL desconocido: '{log_level}'")

    return Settings(
        snapshot_logging_enabled=snapshot_logging_enabled,
        dry_run=dry_run,
        snapshot_dir=snapshot_dir,
        snapshot_url=snapshot_url,
        snapshot_username=_require(environ, "SNAPSHOT_URL_USERNAME"),
        snapshot_password=_require(environ, "SNAPSHOT_URL_PASSWORD"),
        polygon=parse_polygon(_require(environ, "POLYGON_POINTS")),
        brightness_threshold=brightness_threshold,
        snow_ratio_threshold=snow_ratio_threshold,
        ha_url=ha_url.rstrip("/") if ha_url else None,
        ha_token=ha_token,
        ha_entity_id=ha_entity_id,
        check_interval_minutes=check_interval_minutes,
        http_timeout_seconds=http_timeout_seconds,
        log_level=log_level,
    )


def parse_polygon(raw: str) -> Polygon:
    """
    Interpreta POLYGON_POINTS, un JSON de la forma `[[x, y], [x, y], ...]`.

    Los vértices deben ser enteros y al menos 3. Un polígono que se
    auto-intersecta o no tiene área se acepta, pero se advierte en el log.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"POLYGON_POINTS no es un JSON válido: {e}") from e

    if not isinstance(data, list):
        raise ConfigurationError("POLYGON_POINTS debe ser una lista de pares [x, y]")

    pairs = []
    for item in data:
        if not (isinstance(item, list) and len(item) == 2 and all(_is_int(v) for v in item)):
            raise ConfigurationError(f"Vértice inválido en POLYGON_POINTS: {item!r}")
        pairs.append((item[0], item[1]))

    if len(pairs) < 3:
        raise ConfigurationError(f"POLYGON_POINTS necesita al menos 3 vértices, se recibieron {len(pairs)}")

    shape = ShapelyPolygon(pairs)
    if not shape.is_valid or shape.area == 0:
        logging.warning("El polígono configurado no es simple o no tiene área: %s", pairs)

    return Polygon.from_pairs(pairs)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _get(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require(environ: Mapping[str, str], name: str) -> str:
    value = _get(environ, name)
    if value is None:
        raise ConfigurationError(f"La variable de entorno '{name}' no está definida.")
    return value


def _parse_bool(environ: Mapping[str, str], name: str) -> bool:
    value = _get(environ, name)
    if value is None:
        return False
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    raise ConfigurationError(f"'{name}' debe ser 'true' o 'false', se recibió '{value}'")


def _parse_int(environ: Mapping[str, str], name: str) -> int:
    value = _require(environ, name)
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"'{name}' debe ser un entero, se recibió '{value}'") from e


def _parse_float(environ: Mapping[str, str], name: str) -> float:
    value = _require(environ, name)
    try:
        number = float(value)
    except ValueError as e:
        raise ConfigurationError(f"'{name}' debe ser un número, se recibió '{value}'") from e
    if not math.isfinite(number):
        raise ConfigurationError(f"'{name}' debe ser un número finito, se recibió '{value}'")
    return number


def _validate_url(name: str, value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"'{name}' debe ser una URL http(s), se recibió '{value}'")
