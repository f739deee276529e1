'''
chunks.py -- fixed size cubic block of tiles, the unit of storage and
generation, and its row format for the table store

Row format:
    chunk_x, chunk_y, chunk_z, z, y, x0_bg, x0_fg, x1_bg, x1_fg, ...
one row per (z, y) line of the chunk that holds at least one tile. A cell is
an image id (int), NO_IMAGE ("-") for a channel without image, or None when
there is no tile at that x.
'''

import numpy

from config import CHUNK_SIZE
from tile import Tile

NO_IMAGE = '-'
NONE_ID = -1  # stored in the bg/fg arrays for a channel without image
ROW_HEADER = 5
MAX_IMAGE_ID = 0xFFFF  # image ids are 16 bit


class DataFormatError(ValueError):
    """Raised when a persisted row or cell can not be decoded."""


def row_columns(size=CHUNK_SIZE):
    columns = ['chunk_x', 'chunk_y', 'chunk_z', 'z', 'y']
    for x in range(size):
        columns += [f'x{x}_bg', f'x{x}_fg']
    return columns


def is_int(value):
    return isinstance(value, (int, numpy.integer)) and not isinstance(value, (bool, numpy.bool_))


def row_int(row, index, name):
    try:
        value = row[index]
    except IndexError:
        raise DataFormatError(f'row is missing field {name}') from None
    if not is_int(value):
        raise DataFormatError(f'{name} is not an int: {value!r}')
    return int(value)


def encode_channel(image_id):
    if image_id == NONE_ID:
        return NO_IMAGE
    return int(image_id)


def decode_channel(value, field):
    if is_int(value):
        if not 0 <= value <= MAX_IMAGE_ID:
            raise DataFormatError(f'invalid tile entry in {field}: image id {value} out of range')
        return int(value)
    if value == NO_IMAGE:
        return None
    raise DataFormatError(f'invalid tile entry in {field}: {value!r}')


class Chunk(object):
    """
    A dense size^3 block of optional tiles indexed [z, y, x] by local
    coordinates.

    A slot without a tile (get() returns None) has no information and defers
    to the terrain generator; Tile(None, None) is explicitly empty and must
    not be generated. Storage is allocated on the first write.
    """
    def __init__(self, size=CHUNK_SIZE):
        self.size = size
        self.bg = None
        self.fg = None
        self.present = None

    def _allocate(self):
        shape = (self.size, self.size, self.size)
        self.bg = numpy.full(shape, NONE_ID, dtype=numpy.int32)
        self.fg = numpy.full(shape, NONE_ID, dtype=numpy.int32)
        self.present = numpy.zeros(shape, dtype=bool)

    def has_data(self):
        return self.present is not None

    def inside(self, x, y, z):
        return 0 <= x < self.size and 0 <= y < self.size and 0 <= z < self.size

    def get(self, x, y, z):
        if self.present is None or not self.inside(x, y, z):
            return None
        if not self.present[z, y, x]:
            return None
        return Tile(self._channel(self.bg[z, y, x]), self._channel(self.fg[z, y, x]))

    @staticmethod
    def _channel(value):
        if value == NONE_ID:
            return None
        return int(value)

    def set(self, x, y, z, tile):
        if not self.inside(x, y, z):
            raise IndexError(f'local position {(x, y, z)} outside chunk of size {self.size}')
        if tile is None:
            if self.present is not None:
                self.present[z, y, x] = False
                self.bg[z, y, x] = NONE_ID
                self.fg[z, y, x] = NONE_ID
            return
        for image_id in tile:
            if image_id is not None and not 0 <= image_id <= MAX_IMAGE_ID:
                raise ValueError(f'invalid image id {image_id}')
        if self.present is None:
            self._allocate()
        self.bg[z, y, x] = NONE_ID if tile.bg is None else tile.bg
        self.fg[z, y, x] = NONE_ID if tile.fg is None else tile.fg
        self.present[z, y, x] = True

    def fill(self, bg, fg, present=None):
        """ Bulk assign the whole chunk from [z, y, x] image id arrays
        (NONE_ID for an empty channel). All tiles are present unless a
        `present` mask is given.

        """
        if self.present is None:
            self._allocate()
        self.bg[...] = bg
        self.fg[...] = fg
        if present is None:
            self.present[...] = True
        else:
            self.present[...] = present

    def count(self):
        if self.present is None:
            return 0
        return int(self.present.sum())

    def tiles(self):
        """ Iterate ((x, y, z), Tile) over every tile in the chunk.

        """
        if self.present is None:
            return
        for z, y, x in numpy.argwhere(self.present):
            yield (int(x), int(y), int(z)), self.get(x, y, z)

    def rows(self, chunk_x, chunk_y, chunk_z):
        """ Yield the persisted rows of the chunk. Lines along x without any
        tile are skipped.

        """
        if self.present is None:
            return
        for z in range(self.size):
            for y in range(self.size):
                line = self.present[z, y]
                if not line.any():
                    continue
                row = [chunk_x, chunk_y, chunk_z, z, y]
                for x in range(self.size):
                    if line[x]:
                        row.append(encode_channel(self.bg[z, y, x]))
                        row.append(encode_channel(self.fg[z, y, x]))
                    else:
                        row.append(None)
                        row.append(None)
                yield row

    def store(self, table_store, table_name, chunk_x, chunk_y, chunk_z):
        count = 0
        for row in self.rows(chunk_x, chunk_y, chunk_z):
            table_store.insert_row(table_name, row)
            count += 1
        return count

    def parse_row(self, row):
        """ Read one persisted row (see module doc) into the chunk.

        Raises DataFormatError if the row or any of its cells is malformed.
        Nothing is written to the chunk unless the whole row is valid.

        """
        expected = ROW_HEADER + 2 * self.size
        if len(row) != expected:
            raise DataFormatError(f'row has {len(row)} fields, expected {expected}')
        z = row_int(row, 3, 'z')
        y = row_int(row, 4, 'y')
        if not (0 <= z < self.size and 0 <= y < self.size):
            raise DataFormatError(f'line (z={z}, y={y}) outside chunk of size {self.size}')
        tiles = []
        for x in range(self.size):
            bg = row[ROW_HEADER + 2 * x]
            fg = row[ROW_HEADER + 2 * x + 1]
            if bg is None and fg is None:
                continue  # no entry
            if bg is None:
                raise DataFormatError(f'invalid tile entry at x{x}: foreground {fg!r} without background')
            tile = Tile(decode_channel(bg, f'x{x}_bg'),
                        None if fg is None else decode_channel(fg, f'x{x}_fg'))
            tiles.append((x, tile))
        for x, tile in tiles:
            self.set(x, y, z, tile)
        return len(tiles)
