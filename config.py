# Size of chunks used for storage and generation (x, y and z).
CHUNK_SIZE = 32

# World seed shared by every noise layer (each layer adds its own offset).
WORLD_SEED = 1234

# Persistence
TABLE_NAME = 'map'
WORLD_PATH = 'world.pkl'

# Headless view (tiles) printed by main.py.
VIEW_WIDTH = 64
VIEW_HEIGHT = 24
# How many z levels to look down through for the first non-empty tile.
VIEW_DEPTH = 10

# Enable ANSI colors in logs.
LOG_COLOR = True

# Minimum level printed: DEBUG, INFO, WARN or ERROR.
LOG_LEVEL = 'INFO'

# Log every chunk generation (noisy when scrolling through a large area).
LOG_GENERATION = False

# Log noise bound widening/out-of-range events.
LOG_NOISE_BOUNDS = True
