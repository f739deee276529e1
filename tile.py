from collections import namedtuple


class Tile(namedtuple('Tile', ['bg', 'fg'])):
    """
    One grid cell: a background image (grass, dirt, stone, water, floor ...)
    and a foreground image (tree, flower ...). None on a channel means there
    is nothing on it; Tile() is explicitly empty space.
    """
    __slots__ = ()

    def __new__(cls, bg=None, fg=None):
        return super().__new__(cls, bg, fg)

    def is_empty(self):
        return self.bg is None and self.fg is None

    def with_fg(self, fg):
        return self._replace(fg=fg)

    def with_bg(self, bg):
        return self._replace(bg=bg)
