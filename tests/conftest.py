import httpx
import numpy as np
import pytest

from config.settings import Settings
from src.domain import Polygon
from tests.helpers import HA_ENTITY_ID, HA_URL, SNAPSHOT_URL, RecordingTransport, encode_png


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        values = dict(
            snapshot_logging_enabled=False,
            dry_run=False,
            snapshot_dir=None,
            snapshot_url=SNAPSHOT_URL,
            snapshot_username="admin",
            snapshot_password="secret",
            polygon=Polygon.from_pairs([(0, 0), (1, 0), (1, 1), (0, 1)]),
            brightness_threshold=150,
            snow_ratio_threshold=0.5,
            ha_url=HA_URL,
            ha_token="token-123",
            ha_entity_id=HA_ENTITY_ID,
            check_interval_minutes=5.0,
        )
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def snow_frame():
    """Captura BGR de 4x4 con la esquina superior izquierda (2x2) blanca."""
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    image[0:2, 0:2] = 255
    return image


@pytest.fixture
def camera_transport(snow_frame):
    return RecordingTransport(lambda request: httpx.Response(200, content=encode_png(snow_frame)))


@pytest.fixture
def ha_transport():
    return RecordingTransport(lambda request: httpx.Response(200, json={"state": "on"}))
