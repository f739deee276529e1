import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from images import (IMAGE_ID, IMAGE_NAME, IMAGE_LAYER, IMAGES_X, IMAGES_CNT, MULTI_IMAGES, MultiImage,
                    image_id, image_coords, find_multi, multi_reverse_map)


def test_image_ids_are_palette_positions():
    assert image_id(0, 0) == 0
    assert image_id(3, 2) == 3 + 2 * IMAGES_X
    assert image_coords(image_id(5, 7)) == (5, 7)
    assert len(IMAGE_ID) == len(IMAGE_NAME)
    for name, i in IMAGE_ID.items():
        assert IMAGE_NAME[i] == name


def test_image_layers():
    assert IMAGE_LAYER[IMAGE_ID['Stone']] == 'bg'
    assert IMAGE_LAYER[IMAGE_ID['Flower']] == 'fg'
    for multi in MULTI_IMAGES:
        assert all(IMAGE_LAYER[i] == 'fg' for i in multi.image_ids)


def test_multi_image_bounds():
    multi = MultiImage([(2, 5), (3, 5), (2, 6), (3, 6)])
    assert (multi.min_x, multi.min_y, multi.size_x, multi.size_y) == (2, 5, 2, 2)
    assert multi.offsets() == [
        (image_id(2, 5), 0, 0), (image_id(3, 5), 1, 0),
        (image_id(2, 6), 0, 1), (image_id(3, 6), 1, 1),
    ]
    # centered: size // 2 tiles left of and above the anchor
    assert [(x, y) for _, x, y in multi.placements(0, 0)] == [(-1, -1), (0, -1), (-1, 0), (0, 0)]
    with pytest.raises(ValueError):
        MultiImage([])


def test_find_multi():
    assert find_multi(IMAGE_ID['Tree Middle']) == 0
    assert find_multi(IMAGE_ID['Shrub Trunk']) == 1
    assert find_multi(IMAGE_ID['Grass']) is None


def test_multi_reverse_map():
    reverse = multi_reverse_map()
    assert len(reverse) == IMAGES_CNT
    assert reverse[IMAGE_ID['Tree Top']] == (0, 0, 0)
    assert reverse[IMAGE_ID['Tree Trunk']] == (0, 0, 2)
    assert reverse[IMAGE_ID['Shrub Trunk']] == (1, 0, 1)
    assert reverse[IMAGE_ID['Stone']] is None
    assert sum(r is not None for r in reverse) == sum(len(m.image_ids) for m in MULTI_IMAGES)
