from .schemas import ClassificationResult, DetectionOutcome, Point, Polygon

__all__ = ["ClassificationResult", "DetectionOutcome", "Point", "Polygon"]
