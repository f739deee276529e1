'''
main.py -- headless world tool: load a world file, print a text view of the
map around a position, optionally plant a tree there and save

usage:
    python main.py [world-file] [x y z]
    python main.py [world-file] plant x y z
'''

import os
import pickle
import sys

import config
import logutil
from chunks import DataFormatError
from images import IMAGE_NAME, IMAGE_ID, MULTI_IMAGES, find_multi
from table_store import TableStore, TableStoreError
from world import Map


def load_world(path, table_name=None):
    """ Return (world, store) for `path`. A missing or unreadable file gives
    an empty world.

    """
    if not os.path.exists(path):
        logutil.log('MAIN', f'{path} does not exist, starting an empty world')
        return Map(seed=config.WORLD_SEED), TableStore()
    try:
        store = TableStore.load(path)
    except (OSError, EOFError, pickle.UnpicklingError, TableStoreError) as e:
        logutil.log('MAIN', f'could not read {path}: {e}', level='ERROR')
        return Map(seed=config.WORLD_SEED), TableStore()
    world = Map(seed=config.WORLD_SEED)
    table_name = table_name or config.TABLE_NAME
    if store.has_table(table_name):
        try:
            world.parse_table(store, table_name)
        except DataFormatError as e:
            logutil.log('MAIN', f'load failed, starting an empty world: {e}', level='ERROR')
            world = Map(seed=config.WORLD_SEED)
    return world, store


def save_world(world, store, path, table_name=None):
    world.store(store, table_name or config.TABLE_NAME)
    store.save(path)
    logutil.log('MAIN', f'saved {world.edit_count()} edited tiles to {path}')


def tile_char(tile):
    if tile is None or tile.is_empty():
        return ' '
    if tile.fg is not None:
        return IMAGE_NAME.get(tile.fg, '?')[0].lower()
    return IMAGE_NAME.get(tile.bg, '?')[0]


def render_view(world, x0, y0, z, width, height, depth):
    """ Text view of the map seen from above: for every (x, y) the first
    tile with an image looking down from level z.

    """
    lines = []
    for y in range(y0, y0 + height):
        line = []
        for x in range(x0, x0 + width):
            char = ' '
            for dz in range(depth):
                tile = world.get(x, y, z - dz)
                if not tile.is_empty():
                    char = tile_char(tile)
                    break
            line.append(char)
        lines.append(''.join(line))
    return '\n'.join(lines)


def parse_position(args):
    try:
        x, y, z = (int(a) for a in args)
    except ValueError:
        raise SystemExit(f'invalid position {" ".join(args)}')
    return x, y, z


def main():
    args = sys.argv[1:]
    if args and not args[0].lstrip('-').isdigit() and args[0] != 'plant':
        config.WORLD_PATH = args.pop(0)
    plant = False
    if args and args[0] == 'plant':
        plant = True
        args.pop(0)
    if args and len(args) != 3:
        raise SystemExit(__doc__)
    x, y, z = parse_position(args) if args else (0, 0, 0)

    world, store = load_world(config.WORLD_PATH)
    if plant:
        tree = MULTI_IMAGES[find_multi(IMAGE_ID['Tree Top'])]
        world.set_multi(x, y, z, tree)
        logutil.log('MAIN', f'planted {tree} at {(x, y, z)}')
        save_world(world, store, config.WORLD_PATH)

    width = getattr(config, 'VIEW_WIDTH', 64)
    height = getattr(config, 'VIEW_HEIGHT', 24)
    depth = getattr(config, 'VIEW_DEPTH', 10)
    print(render_view(world, x - width // 2, y - height // 2, z, width, height, depth))
    counts = world.take_ore_counts()
    logutil.event('MAIN', 'ore_discovered', **counts)


if __name__ == '__main__':
    main()
