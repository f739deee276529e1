'''
mapgen.py -- procedural terrain: seeded noise layers with per-chunk caching
and the rules that turn layer values into tiles
'''

import time
from collections import namedtuple

import numpy

import config
import logutil
import noise
from config import CHUNK_SIZE
from coords import chunk_origin
from chunks import NONE_ID
from images import (GRASS, DIRT, STONE, WATER, IRON_ORE, COPPER_ORE, GOLD_ORE,
                    FLOWER, TALL_GRASS, BUSH, SAPLING)


_LayerConfig = namedtuple('LayerConfig', [
    'name',            # layer id
    'dims',            # 2 for a map over (x, y), 3 for a volume over (x, y, z)
    'frequency',
    'octaves',
    'lacunarity',
    'seed',            # added to the world seed
    'expected_range',  # (min, max) of the raw fbm output used for normalization
    'target_range',    # (min, max) of the integer output
    'adaptive',        # widen expected_range when generation exceeds it
    'gain',
])


class LayerConfig(_LayerConfig):
    __slots__ = ()

    def __new__(cls, name, dims, frequency, octaves, lacunarity, seed,
                expected_range, target_range, adaptive=True, gain=0.5):
        if dims not in (2, 3):
            raise ValueError(f'layer {name}: dims must be 2 or 3, not {dims}')
        lo, hi = expected_range
        if not hi > lo:
            raise ValueError(f'layer {name}: empty expected range {expected_range}')
        return super().__new__(cls, name, dims, frequency, octaves, lacunarity, seed,
                               (float(lo), float(hi)), tuple(target_range), adaptive, gain)


# The height bounds were measured over a large area and are kept fixed so
# the surface never jumps between chunks generated before and after a
# widening; the remaining layers adapt.
LAYERS = [
    LayerConfig('height', 2, frequency=0.04, octaves=5, lacunarity=2.0, seed=12,
                expected_range=(-0.66, 0.66), target_range=(-4, 5), adaptive=False),
    LayerConfig('soil', 2, frequency=0.09, octaves=2, lacunarity=2.0, seed=14,
                expected_range=(-0.5, 0.5), target_range=(1, 4)),
    LayerConfig('vegetation', 2, frequency=0.35, octaves=2, lacunarity=2.2, seed=16,
                expected_range=(-0.5, 0.5), target_range=(0, 10)),
    LayerConfig('iron', 3, frequency=0.12, octaves=2, lacunarity=2.0, seed=21,
                expected_range=(-0.5, 0.5), target_range=(-3, 10)),
    LayerConfig('copper', 3, frequency=0.12, octaves=2, lacunarity=2.0, seed=22,
                expected_range=(-0.5, 0.5), target_range=(-2, 10)),
    LayerConfig('gold', 3, frequency=0.16, octaves=2, lacunarity=2.0, seed=23,
                expected_range=(-0.5, 0.5), target_range=(-1, 10)),
]

ORES = ('iron', 'copper', 'gold')

# Vegetation value buckets on grass: below 6 nothing, then tall grass,
# flower, bush and sapling.
FOLIAGE_THRESHOLDS = numpy.array([6, 8, 9, 10])
FOLIAGE = numpy.array([NONE_ID, TALL_GRASS, FLOWER, BUSH, SAPLING], dtype=numpy.int32)


class NoiseLayer(object):
    """
    One named, seeded fbm field, normalized to integers and cached per chunk.

    observed_min/observed_max start at the configured expected range. For
    adaptive layers they widen whenever a newly generated chunk exceeds them;
    chunks already in the cache keep the normalization they were made with.
    """
    def __init__(self, layer_config, world_seed=0, bounds=None):
        self.config = layer_config
        self.name = layer_config.name
        self.dims = layer_config.dims
        self.seed = world_seed + layer_config.seed
        self.simplex = noise.SimplexNoise(seed=self.seed)
        self.observed_min, self.observed_max = bounds if bounds is not None else layer_config.expected_range
        self.cache = {}

    def __repr__(self):
        return f'NoiseLayer({self.name!r}, seed={self.seed}, bounds=({self.observed_min}, {self.observed_max}))'

    def _key(self, origin, size):
        return tuple(int(o) for o in origin[:self.dims]), size

    def raw(self, origin, size=CHUNK_SIZE):
        """ Unnormalized fbm over the size^dims window at world `origin`,
        flattened [y][x] or [z][y][x].

        """
        c = self.config
        Z = noise.grid(origin, size, self.dims)
        return noise.fbm(Z, self.simplex, octaves=c.octaves, lacunarity=c.lacunarity,
                         gain=c.gain, frequency=c.frequency)

    def bounds(self):
        return self.observed_min, self.observed_max

    def widen(self, lo, hi):
        """ Extend the observed bounds to include [lo, hi]. Returns True if
        anything changed. Non adaptive layers only report the overflow.

        """
        if lo >= self.observed_min and hi <= self.observed_max:
            return False
        log_bounds = getattr(config, 'LOG_NOISE_BOUNDS', True)
        if not self.config.adaptive:
            if log_bounds:
                logutil.event('NOISE', 'noise_out_of_range', level='WARN', layer=self.name,
                              min=float(lo), max=float(hi),
                              bounds_min=self.observed_min, bounds_max=self.observed_max)
            return False
        if lo < self.observed_min:
            if log_bounds:
                logutil.event('NOISE', 'noise_bounds_widened', level='WARN', layer=self.name,
                              bound='min', old=self.observed_min, new=float(lo))
            self.observed_min = float(lo)
        if hi > self.observed_max:
            if log_bounds:
                logutil.event('NOISE', 'noise_bounds_widened', level='WARN', layer=self.name,
                              bound='max', old=self.observed_max, new=float(hi))
            self.observed_max = float(hi)
        return True

    def normalize(self, values):
        """ Rescale raw values from the observed bounds to the target range,
        truncated toward zero.

        """
        tmin, tmax = self.config.target_range
        scaled = (numpy.asarray(values) - self.observed_min) / (self.observed_max - self.observed_min)
        return (scaled * (tmax - tmin) + tmin).astype(numpy.int32)

    def generate(self, origin, size=CHUNK_SIZE):
        """ Return the integer layer values for the window at world `origin`,
        shaped (size, size) [y, x] or (size, size, size) [z, y, x]. Computed
        once per window.

        """
        key = self._key(origin, size)
        values = self.cache.get(key)
        if values is None:
            raw = self.raw(origin, size)
            self.widen(raw.min(), raw.max())
            values = self.normalize(raw).reshape((size,) * self.dims)
            self.cache[key] = values
        return values

    def cached(self, origin, size=CHUNK_SIZE):
        return self._key(origin, size) in self.cache

    def cache_size(self):
        return len(self.cache)

    def calibrate(self, origins, size=CHUNK_SIZE):
        """ Sample the windows at `origins` and widen the bounds to cover
        them without caching anything, so later chunks share one
        normalization.

        """
        for origin in origins:
            raw = self.raw(origin, size)
            self.widen(raw.min(), raw.max())
        return self.bounds()


def foliage(vegetation):
    return FOLIAGE[numpy.digitize(vegetation, FOLIAGE_THRESHOLDS)]


def compose(z_levels, height, soil, vegetation, iron, copper, gold):
    """ Turn layer values into tile images for one chunk.

    z_levels are the world z of each local z; height, soil and vegetation
    are [y, x] maps, the ores [z, y, x] volumes. Returns bg and fg [z, y, x]
    image id arrays (NONE_ID for nothing) and the ore counts of the chunk.

    Relative to the surface (distance = z - height): above is air, or water
    at and below sea level (z <= 0 over ground at height <= 0); the surface is
    grass, or dirt when under water; then soil tiles of dirt, then rock. In
    rock an ore is present where its value is negative, gold winning over
    copper over iron.
    """
    z = numpy.asarray(z_levels)[:, numpy.newaxis, numpy.newaxis]
    h = numpy.asarray(height)[numpy.newaxis]
    soil = numpy.asarray(soil)[numpy.newaxis]
    distance = z - h

    bg = numpy.full(distance.shape, NONE_ID, dtype=numpy.int32)
    bg[(distance > 0) & (h <= 0) & (z <= 0)] = WATER
    surface = distance == 0
    bg[surface & (h >= 0)] = GRASS
    bg[surface & (h < 0)] = DIRT
    bg[(distance < 0) & (distance >= -soil)] = DIRT

    rock = distance < -soil
    ore = numpy.full(distance.shape, STONE, dtype=numpy.int32)
    ore[numpy.asarray(iron) < 0] = IRON_ORE
    ore[numpy.asarray(copper) < 0] = COPPER_ORE
    ore[numpy.asarray(gold) < 0] = GOLD_ORE
    bg[rock] = ore[rock]

    counts = {
        'iron': int((bg == IRON_ORE).sum()),
        'copper': int((bg == COPPER_ORE).sum()),
        'gold': int((bg == GOLD_ORE).sum()),
    }

    fg = numpy.where(bg == GRASS, foliage(vegetation)[numpy.newaxis], NONE_ID).astype(numpy.int32)
    return bg, fg, counts


class TerrainGenerator(object):
    def __init__(self, seed=None, layers=None):
        if seed is None:
            seed = config.WORLD_SEED
        self.seed = seed
        self.layers = {}
        for layer_config in (LAYERS if layers is None else layers):
            self.layers[layer_config.name] = NoiseLayer(layer_config, world_seed=seed)
        missing = {'height', 'soil', 'vegetation'}.union(ORES).difference(self.layers)
        if missing:
            raise ValueError(f'terrain generator is missing layers {sorted(missing)}')

    def layer(self, name):
        return self.layers[name]

    def generate(self, chunk_pos, size=CHUNK_SIZE):
        """ Generate the chunk at signed chunk coordinate `chunk_pos`.

        Returns (bg, fg, ore_counts) as described in compose().

        """
        t0 = time.perf_counter()
        origin = chunk_origin(chunk_pos, size)
        values = {name: layer.generate(origin, size) for name, layer in self.layers.items()}
        z_levels = origin[2] + numpy.arange(size)
        bg, fg, counts = compose(z_levels, values['height'], values['soil'], values['vegetation'],
                                 values['iron'], values['copper'], values['gold'])
        if getattr(config, 'LOG_GENERATION', False):
            logutil.event('MAPGEN', 'chunk_generated', chunk=chunk_pos,
                          ms=(time.perf_counter() - t0) * 1000.0, **counts)
        return bg, fg, counts

    def calibrate(self, chunk_positions, size=CHUNK_SIZE):
        """ Widen every adaptive layer over the given chunks before any of
        them is generated.

        """
        origins = [chunk_origin(pos, size) for pos in chunk_positions]
        return {name: layer.calibrate(origins, size) for name, layer in self.layers.items()
                if layer.config.adaptive}
