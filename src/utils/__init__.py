from .http import build_camera_client, build_home_assistant_client
from .snapshots import build_snapshot_store
