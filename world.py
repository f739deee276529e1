'''
world.py -- the tile map: explicit edits layered over cached procedural
terrain, and persistence of the edits through a table store
'''

import config
import logutil
from config import CHUNK_SIZE
from coords import split_position
from images import IMAGE_LAYER
from chunks import Chunk, DataFormatError, row_columns, row_int
from mapgen import TerrainGenerator, ORES


class Map(object):
    """
    An unbounded 3D tile map addressed by signed (x, y, z).

    `modified` holds the chunks of explicit edits and always wins; `generated`
    caches terrain chunks, each generated the first time one of its tiles is
    read and kept for the lifetime of the map. Only edits are persisted.
    """
    def __init__(self, seed=None, generator=None, chunk_size=CHUNK_SIZE):
        self.chunk_size = chunk_size
        self.generator = generator if generator is not None else TerrainGenerator(seed)
        self.modified = {}
        self.generated = {}
        self.ore_counts = dict.fromkeys(ORES, 0)

    @classmethod
    def load(cls, table_store, table_name=None, **kwargs):
        world = cls(**kwargs)
        world.parse_table(table_store, table_name)
        return world

    def get(self, x, y, z):
        """ Return the tile at (x, y, z): the edit if there is one, otherwise
        the generated terrain.

        """
        chunk_pos, local = split_position((x, y, z), self.chunk_size)
        chunk = self.modified.get(chunk_pos)
        if chunk is not None:
            tile = chunk.get(*local)
            if tile is not None:
                return tile
        return self.generated_chunk(chunk_pos).get(*local)

    def get_modified(self, x, y, z):
        chunk_pos, local = split_position((x, y, z), self.chunk_size)
        chunk = self.modified.get(chunk_pos)
        if chunk is None:
            return None
        return chunk.get(*local)

    def generated_chunk(self, chunk_pos):
        chunk = self.generated.get(chunk_pos)
        if chunk is None or not chunk.has_data():
            chunk = Chunk(self.chunk_size)
            bg, fg, counts = self.generator.generate(chunk_pos, self.chunk_size)
            chunk.fill(bg, fg)
            for ore, n in counts.items():
                self.ore_counts[ore] += n
            self.generated[chunk_pos] = chunk
        return chunk

    def set(self, x, y, z, tile):
        chunk_pos, local = split_position((x, y, z), self.chunk_size)
        chunk = self.modified.get(chunk_pos)
        if chunk is None:
            chunk = Chunk(self.chunk_size)
            chunk.set(*local, tile)
            self.modified[chunk_pos] = chunk
        else:
            chunk.set(*local, tile)

    def clear(self, x, y, z):
        """ Drop the edit at (x, y, z) so the generated terrain shows again.

        """
        chunk_pos, local = split_position((x, y, z), self.chunk_size)
        chunk = self.modified.get(chunk_pos)
        if chunk is not None:
            chunk.set(*local, None)

    def set_multi(self, x, y, z, multi_image, layer=None):
        """ Place every part of `multi_image` with the composite centered on
        (x, y, z). Parts go onto `layer`, or the channel registered for each
        part image when it is None; the other channel of each tile is kept
        as it is.

        """
        for image_id, px, py in multi_image.placements(x, y):
            tile = self.get(px, py, z)
            part_layer = layer or IMAGE_LAYER.get(image_id, 'bg')
            if part_layer == 'fg':
                tile = tile.with_fg(image_id)
            elif part_layer == 'bg':
                tile = tile.with_bg(image_id)
            else:
                raise ValueError(f'unknown tile layer {part_layer!r}')
            self.set(px, py, z, tile)

    def take_ore_counts(self):
        """ Return the ore discovered by generation since the last call and
        reset the tally.

        """
        counts = self.ore_counts
        self.ore_counts = dict.fromkeys(ORES, 0)
        return counts

    def edit_count(self):
        return sum(chunk.count() for chunk in self.modified.values())

    def store(self, table_store, table_name=None):
        """ Replace table `table_name` with one row per populated chunk line
        of the edits. Chunk coordinates are written signed.

        """
        if table_name is None:
            table_name = config.TABLE_NAME
        table_store.create_or_replace_table(table_name)
        for column in row_columns(self.chunk_size):
            table_store.create_column(table_name, column)
        rows = 0
        for chunk_pos in sorted(self.modified):
            rows += self.modified[chunk_pos].store(table_store, table_name, *chunk_pos)
        logutil.log('WORLD', f'stored {rows} rows of {len(self.modified)} chunks in {table_name}')
        return rows

    def parse_table(self, table_store, table_name=None):
        """ Load the edits persisted by store().

        The edits in the table replace the edits of the map; edits made
        before the call are dropped, not merged.

        The whole table is parsed before anything changes: the first bad row
        raises DataFormatError and the map keeps its previous edits.

        """
        if table_name is None:
            table_name = config.TABLE_NAME
        rows = table_store.select_all(table_name)
        chunks = {}
        for n, row in enumerate(rows):
            try:
                chunk_pos = (row_int(row, 0, 'chunk_x'),
                             row_int(row, 1, 'chunk_y'),
                             row_int(row, 2, 'chunk_z'))
                chunk = chunks.get(chunk_pos)
                if chunk is None:
                    chunk = chunks[chunk_pos] = Chunk(self.chunk_size)
                chunk.parse_row(row)
            except DataFormatError as e:
                raise DataFormatError(f'{table_name} row {n}: {e}') from e
        self.modified = chunks
        logutil.log('WORLD', f'loaded {len(rows)} rows into {len(chunks)} chunks from {table_name}')
        return len(rows)
