'''
images.py -- registry of the palette images tiles refer to

Images live on a IMAGES_X x IMAGES_Y palette; the id of an image is its
palette position x + y * IMAGES_X.
'''

IMAGES_X = 16
IMAGES_Y = 16
IMAGES_CNT = IMAGES_X * IMAGES_Y


def image_id(x, y):
    assert 0 <= x < IMAGES_X and 0 <= y < IMAGES_Y, (x, y)
    return x + y * IMAGES_X


def image_coords(image_id):
    """ Return the palette (x, y) of `image_id`.

    """
    return image_id % IMAGES_X, image_id // IMAGES_X


class Image(object):
    name = None
    coords = None
    # Which tile channel the image is normally placed on.
    layer = 'bg'


class Grass(Image):
    name = 'Grass'
    coords = (0, 0)

class Dirt(Image):
    name = 'Dirt'
    coords = (1, 0)

class Stone(Image):
    name = 'Stone'
    coords = (2, 0)

class Water(Image):
    name = 'Water'
    coords = (3, 0)

class IronOre(Image):
    name = 'Iron Ore'
    coords = (4, 0)

class CopperOre(Image):
    name = 'Copper Ore'
    coords = (5, 0)

class GoldOre(Image):
    name = 'Gold Ore'
    coords = (6, 0)

class Foliage(Image):
    layer = 'fg'

class Flower(Foliage):
    name = 'Flower'
    coords = (2, 1)

class TallGrass(Foliage):
    name = 'Tall Grass'
    coords = (3, 1)

class Bush(Foliage):
    name = 'Bush'
    coords = (4, 1)

class Sapling(Foliage):
    name = 'Sapling'
    coords = (5, 1)

# Trunk and crown parts of the multi-tile trees.
class TreeTop(Foliage):
    name = 'Tree Top'
    coords = (0, 1)

class TreeMiddle(Foliage):
    name = 'Tree Middle'
    coords = (0, 2)

class TreeTrunk(Foliage):
    name = 'Tree Trunk'
    coords = (0, 3)

class ShrubTop(Foliage):
    name = 'Shrub Top'
    coords = (1, 2)

class ShrubTrunk(Foliage):
    name = 'Shrub Trunk'
    coords = (1, 3)


IMAGES = [
    Grass,
    Dirt,
    Stone,
    Water,
    IronOre,
    CopperOre,
    GoldOre,
    Flower,
    TallGrass,
    Bush,
    Sapling,
    TreeTop,
    TreeMiddle,
    TreeTrunk,
    ShrubTop,
    ShrubTrunk,
]

IMAGE_ID = {}
IMAGE_NAME = {}
IMAGE_LAYER = {}
for x in IMAGES:
    i = image_id(*x.coords)
    assert i not in IMAGE_NAME, x.name
    IMAGE_ID[x.name] = i
    IMAGE_NAME[i] = x.name
    IMAGE_LAYER[i] = x.layer

GRASS = IMAGE_ID['Grass']
DIRT = IMAGE_ID['Dirt']
STONE = IMAGE_ID['Stone']
WATER = IMAGE_ID['Water']
IRON_ORE = IMAGE_ID['Iron Ore']
COPPER_ORE = IMAGE_ID['Copper Ore']
GOLD_ORE = IMAGE_ID['Gold Ore']
FLOWER = IMAGE_ID['Flower']
TALL_GRASS = IMAGE_ID['Tall Grass']
BUSH = IMAGE_ID['Bush']
SAPLING = IMAGE_ID['Sapling']


class MultiImage(object):
    """
    A composite made of several palette images that are placed together on
    neighbouring tiles, e.g. a tree that is three tiles high. The layout of
    the parts on the map mirrors their layout on the palette.
    """
    def __init__(self, coords):
        coords = list(coords)
        if not coords:
            raise ValueError('a multi image needs at least one part')
        self.image_ids = [image_id(x, y) for x, y in coords]
        xs = [x for x, _ in coords]
        ys = [y for _, y in coords]
        self.min_x = min(xs)
        self.min_y = min(ys)
        self.size_x = max(xs) - self.min_x + 1
        self.size_y = max(ys) - self.min_y + 1

    def __repr__(self):
        return f'MultiImage({self.image_ids})'

    def __contains__(self, image_id):
        return image_id in self.image_ids

    def offsets(self):
        """ Return (image_id, dx, dy) for every part, relative to the top left
        corner of the composite.

        """
        result = []
        for i in self.image_ids:
            x, y = image_coords(i)
            result.append((i, x - self.min_x, y - self.min_y))
        return result

    def placements(self, x, y):
        """ Return (image_id, x, y) for every part of the composite centered
        on (x, y).

        """
        dx, dy = self.size_x // 2, self.size_y // 2
        return [(i, x - dx + ox, y - dy + oy) for i, ox, oy in self.offsets()]


MULTI_IMAGES = [
    MultiImage([TreeTop.coords, TreeMiddle.coords, TreeTrunk.coords]),
    MultiImage([ShrubTop.coords, ShrubTrunk.coords]),
]


def find_multi(image_id, multi_images=MULTI_IMAGES):
    """ Return the index of the multi image `image_id` is a part of, or None.

    """
    for i, multi in enumerate(multi_images):
        if image_id in multi:
            return i
    return None


def multi_reverse_map(multi_images=MULTI_IMAGES):
    """ Map every palette image id to (multi index, dx, dy) of the composite
    it belongs to, or None.

    """
    result = [None] * IMAGES_CNT
    for i, multi in enumerate(multi_images):
        for part, dx, dy in multi.offsets():
            result[part] = (i, dx, dy)
    return result
