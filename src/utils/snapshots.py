from typing import Union

from config.settings import Settings
from src.nodes.snapshots import LocalSnapshotStore, NullSnapshotStore


def build_snapshot_store(settings: Settings) -> Union[LocalSnapshotStore, NullSnapshotStore]:
    if not settings.snapshot_logging_enabled:
        return NullSnapshotStore()
    return LocalSnapshotStore(settings.snapshot_dir)
