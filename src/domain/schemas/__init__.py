from .geometry import Point, Polygon
from .snow import ClassificationResult, DetectionOutcome

__all__ = ["Point", "Polygon", "ClassificationResult", "DetectionOutcome"]
