import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import config
import noise
from mapgen import LayerConfig, NoiseLayer


def _layer(expected_range=(-0.5, 0.5), target_range=(0, 10), adaptive=True, dims=2, seed=3):
    return LayerConfig('test', dims, frequency=0.1, octaves=3, lacunarity=2.0, seed=seed,
                       expected_range=expected_range, target_range=target_range, adaptive=adaptive)


def test_grid_order():
    Z = noise.grid((10, 20), 4, 2)
    assert Z.shape == (16, 2)
    assert tuple(Z[0]) == (10, 20)
    assert tuple(Z[1]) == (11, 20)
    assert tuple(Z[4]) == (10, 21)
    Z3 = noise.grid((0, 0, -8), 4, 3)
    assert Z3.shape == (64, 3)
    assert tuple(Z3[0]) == (0, 0, -8)
    assert tuple(Z3[16]) == (0, 0, -7)
    # a 3D origin can feed a 2D grid
    assert tuple(noise.grid((1, 2, 3), 2, 2)[0]) == (1, 2)


def test_simplex_deterministic_per_seed():
    Z = noise.grid((-40, 17), 16, 2) * 0.13
    a = noise.SimplexNoise(seed=42).noise(Z)
    b = noise.SimplexNoise(seed=42).noise(Z)
    c = noise.SimplexNoise(seed=43).noise(Z)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_simplex_leaves_global_random_state_alone():
    np.random.seed(5)
    expected = np.random.rand()
    np.random.seed(5)
    noise.SimplexNoise(seed=99)
    assert np.random.rand() == expected


def test_simplex_range_and_variation():
    for dims in (2, 3):
        Z = noise.grid((0,) * dims, 12, dims) * 0.17
        n = noise.SimplexNoise(seed=1).noise(Z)
        assert np.isfinite(n).all()
        assert np.abs(n).max() <= 3.0
        assert n.std() > 0.01


def test_simplex_far_from_origin():
    Z = noise.grid((1000000, -2000000), 16, 2) * 0.1
    n = noise.SimplexNoise(seed=1).noise(Z)
    assert np.isfinite(n).all()
    assert np.abs(n).max() <= 3.0
    assert n.std() > 0.01


def test_fbm_is_continuous_across_windows():
    s = noise.SimplexNoise(seed=7)
    whole = noise.fbm(noise.grid((0, 0), 32, 2), s, octaves=4, frequency=0.05).reshape(32, 32)
    right = noise.fbm(noise.grid((16, 0), 16, 2), s, octaves=4, frequency=0.05).reshape(16, 16)
    assert np.allclose(whole[:16, 16:], right)


def test_layer_config_validation():
    with pytest.raises(ValueError):
        _layer(dims=4)
    with pytest.raises(ValueError):
        _layer(expected_range=(1.0, 1.0))


def test_normalize_truncates_toward_zero():
    layer = NoiseLayer(_layer(expected_range=(-1.0, 1.0), target_range=(0, 10)))
    assert list(layer.normalize([-1.0, 0.0, 0.999, 1.0])) == [0, 5, 9, 10]
    layer = NoiseLayer(_layer(expected_range=(0.0, 1.0), target_range=(-4, 5)))
    assert list(layer.normalize([0.05, 0.0, 1.0])) == [-3, -4, 5]


def test_generate_shapes_and_cache():
    layer2 = NoiseLayer(_layer(dims=2))
    a = layer2.generate((0, 0, 0), 8)
    assert a.shape == (8, 8)
    assert a.dtype == np.int32
    # 2D layers are shared by every chunk of a column
    assert layer2.generate((0, 0, 8), 8) is a
    assert layer2.cache_size() == 1
    assert layer2.cached((0, 0, -80), 8)
    assert not layer2.cached((8, 0, 0), 8)
    layer3 = NoiseLayer(_layer(dims=3))
    b = layer3.generate((0, 0, 0), 8)
    assert b.shape == (8, 8, 8)
    assert layer3.generate((0, 0, 8), 8) is not b
    assert layer3.cache_size() == 2


def test_generate_is_reproducible():
    a = NoiseLayer(_layer(dims=3), world_seed=100).generate((-16, 8, 0), 8)
    b = NoiseLayer(_layer(dims=3), world_seed=100).generate((-16, 8, 0), 8)
    c = NoiseLayer(_layer(dims=3), world_seed=101).generate((-16, 8, 0), 8)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_adaptive_bounds_widen_and_log(capsys):
    layer = NoiseLayer(_layer(expected_range=(-0.001, 0.001), target_range=(0, 10)))
    raw = layer.raw((0, 0), 16)
    values = layer.generate((0, 0), 16)
    assert layer.observed_min <= raw.min()
    assert layer.observed_max >= raw.max()
    assert layer.observed_min < -0.001 or layer.observed_max > 0.001
    assert values.min() >= 0 and values.max() <= 10
    assert 'noise_bounds_widened' in capsys.readouterr().out


def test_adaptive_bounds_never_narrow():
    layer = NoiseLayer(_layer(expected_range=(-0.001, 0.001)))
    bounds = []
    for origin in ((0, 0), (16, 0), (0, -16), (200, 300)):
        layer.generate(origin, 16)
        bounds.append(layer.bounds())
    for (lo0, hi0), (lo1, hi1) in zip(bounds, bounds[1:]):
        assert lo1 <= lo0
        assert hi1 >= hi0


def test_cached_chunks_keep_their_normalization():
    layer = NoiseLayer(_layer())
    first = layer.generate((0, 0), 8).copy()
    assert layer.widen(-10.0, 10.0)
    assert np.array_equal(layer.generate((0, 0), 8), first)
    assert layer.bounds() == (-10.0, 10.0)


def test_fixed_bounds_do_not_widen(capsys):
    layer = NoiseLayer(_layer(expected_range=(-0.001, 0.001), adaptive=False))
    layer.generate((0, 0), 16)
    assert layer.bounds() == (-0.001, 0.001)
    assert 'noise_out_of_range' in capsys.readouterr().out


def test_bounds_override():
    layer = NoiseLayer(_layer(), bounds=(-2.0, 2.0))
    assert layer.bounds() == (-2.0, 2.0)


def test_calibrate_widens_without_caching():
    layer = NoiseLayer(_layer(expected_range=(-0.001, 0.001)))
    lo, hi = layer.calibrate([(0, 0), (16, 0), (0, 16)], 16)
    assert lo < -0.001 or hi > 0.001
    assert layer.cache_size() == 0
    values = layer.generate((0, 0), 16)
    # windows covered by the calibration do not move the bounds any more
    assert layer.bounds() == (lo, hi)
    assert values.min() >= 0 and values.max() <= 10


def test_bound_logging_can_be_switched_off(capsys, monkeypatch):
    monkeypatch.setattr(config, 'LOG_NOISE_BOUNDS', False)
    layer = NoiseLayer(_layer(expected_range=(-0.001, 0.001)))
    layer.generate((0, 0), 16)
    assert 'noise_bounds_widened' not in capsys.readouterr().out
