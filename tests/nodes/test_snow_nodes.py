import numpy as np
import pytest

from src.domain import ClassificationResult, Polygon
from src.exceptions import SizeMismatchError
from src.nodes.snow import (BrightnessClassifierNode, GreyscaleNode,
                            PolygonMaskNode, SnowDecisionNode)


def test_greyscale_node_produces_single_channel(snow_frame):
    context = GreyscaleNode().run({'image': snow_frame})

    assert context['grey'].shape == (4, 4)
    assert context['grey'][0, 0] == 255
    assert context['grey'][3, 3] == 0


def test_greyscale_node_accepts_single_channel_input():
    grey = np.full((3, 3), 77, dtype=np.uint8)

    context = GreyscaleNode().run({'image': grey})

    np.testing.assert_array_equal(context['grey'], grey)
    assert context['grey'] is not grey


def test_mask_node_uses_snapshot_dimensions():
    node = PolygonMaskNode(Polygon.from_pairs([(0, 0), (1, 0), (1, 1), (0, 1)]))

    context = node.run({'original_shape': (6, 3)})

    assert context['mask'].shape == (3, 6)
    assert np.count_nonzero(context['mask']) == 4


def test_missing_context_key_raises():
    with pytest.raises(ValueError, match="original_shape"):
        PolygonMaskNode(Polygon.from_pairs([(0, 0), (1, 0), (1, 1)])).run({})


def test_classifier_node_stores_counts_and_visualization():
    context = {
        'grey': np.full((4, 4), 200, dtype=np.uint8),
        'mask': np.pad(np.full((2, 2), 255, dtype=np.uint8), ((0, 2), (0, 2))),
    }

    context = BrightnessClassifierNode(brightness_threshold=150).run(context)

    assert context['classification'] == ClassificationResult(16, 4, 4)
    assert context['bright_image'].shape == (4, 4, 3)


def test_classifier_node_propagates_size_mismatch():
    context = {
        'grey': np.zeros((4, 4), dtype=np.uint8),
        'mask': np.zeros((3, 4), dtype=np.uint8),
    }

    with pytest.raises(SizeMismatchError):
        BrightnessClassifierNode(brightness_threshold=150).run(context)


@pytest.mark.parametrize("threshold,expected", [(0.12, True), (0.2, False)])
def test_decision_node(threshold, expected):
    node = SnowDecisionNode(snow_ratio_threshold=threshold, brightness_threshold=100)

    context = node.run({'classification': ClassificationResult(16, 16, 3)})

    assert context['outcome'].snow_detected is expected
    assert context['outcome'].ratio == pytest.approx(0.1875)
