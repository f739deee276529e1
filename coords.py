'''
coords.py -- conversion between signed world coordinates, chunk coordinates
and non-negative array indices
'''

from config import CHUNK_SIZE


def encode(i):
    """ Zigzag-encode a signed integer to a natural number.

    0 -> 0, -1 -> 1, 1 -> 2, -2 -> 3, 2 -> 4, ...

    """
    if i < 0:
        return -2 * i - 1
    return 2 * i


def decode(n):
    """ Inverse of `encode`.

    """
    if n & 1:
        return -(n // 2) - 1
    return n // 2


def split(i, size=CHUNK_SIZE):
    """ Returns the signed chunk coordinate and local offset of world
    coordinate `i`.

    Uses floor division so that -1 lands in chunk -1 at offset size-1.

    Parameters
    ----------
    i : int
    size : int

    Returns
    -------
    (chunk, local) : tuple of ints, local in [0, size)

    """
    return i // size, i % size


def join(chunk, local, size=CHUNK_SIZE):
    return chunk * size + local


def chunkify(i, size=CHUNK_SIZE):
    """ Like `split` but with the chunk coordinate zigzag-encoded into a
    non-negative array index.

    """
    chunk, local = split(i, size)
    return encode(chunk), local


def unchunkify(index, local, size=CHUNK_SIZE):
    return join(decode(index), local, size)


def split_position(position, size=CHUNK_SIZE):
    """ Returns the chunk triple containing `position` and the local offset
    inside that chunk.

    Parameters
    ----------
    position : tuple of 3 ints (x, y, z)

    Returns
    -------
    ((cx, cy, cz), (lx, ly, lz))

    """
    x, y, z = position
    cx, lx = split(x, size)
    cy, ly = split(y, size)
    cz, lz = split(z, size)
    return (cx, cy, cz), (lx, ly, lz)


def chunk_origin(chunk_pos, size=CHUNK_SIZE):
    """ World position of the (0, 0, 0) tile of a chunk.

    """
    return tuple(c * size for c in chunk_pos)
