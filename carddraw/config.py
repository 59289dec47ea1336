# carddraw/config.py
import os

# Draw size
CHART_COUNT = 5
REDRAW_COUNT = 1

# Level range (0 means "use the catalog's lvlMax" for the upper bound)
LOWER_BOUND = 1
UPPER_BOUND = 0

# Weights are positional: weights[i] applies to bucket i
WEIGHTS = (0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 3, 1, 0)
USE_WEIGHTS = True
FORCE_DISTRIBUTION = True

# Grouping levels into equal ranges
MIN_BUCKET_COUNT = 2

# Action list ordering
ORDER_BY_ACTION = True

# Players
PLAYERS = (1, 2)

# Catalog location (relative to project root unless overridden)
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
CATALOG_PATH = os.environ.get(
    "CARDDRAW_CATALOG", os.path.join(_REPO_ROOT, "data", "catalog.json"))
TEMPLATES_DIR = os.path.join(_REPO_ROOT, "templates")
STATIC_DIR = os.path.join(_REPO_ROOT, "static")
