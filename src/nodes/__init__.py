from .base import PipelineNode
from .camera import SnapshotDownloaderNode
from .home_assistant import HomeAssistantStateNode
from .snapshots import LocalSnapshotStore, NullSnapshotStore, SnapshotSaverNode
from .snow import BrightnessClassifierNode, GreyscaleNode, PolygonMaskNode, SnowDecisionNode
