from .detection import BRIGHT_COLOR_BGR, build_mask, classify_brightness, decide_snow

__all__ = ["BRIGHT_COLOR_BGR", "build_mask", "classify_brightness", "decide_snow"]
