import cv2
import httpx
import numpy as np

SNAPSHOT_URL = "http://camera.local/cgi-bin/snapshot.cgi"
HA_URL = "http://homeassistant.local:8123"
HA_ENTITY_ID = "binary_sensor.driveway_snow"


def encode_png(image: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


class RecordingTransport(httpx.MockTransport):
    """MockTransport que guarda cada petición recibida."""

    def __init__(self, handler):
        self.requests = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)
