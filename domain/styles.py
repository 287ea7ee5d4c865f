from __future__ import annotations

DEFAULT_NODE_WIDTH = 200.0
DEFAULT_NODE_HEIGHT = 80.0
DATASOURCE_WIDTH = 300.0
DATASOURCE_HEIGHT = 100.0
AGGREGATE_PIPELINE_HEIGHT = 100.0
JOIN_HEIGHT = 125.0

VERTICAL_SPACING = 100.0
HORIZONTAL_SPACING = 50.0
ARROW_VERTICAL_RATIO = 3 / 5
FILE_ELLIPSE_SIZE = 60.0
FILE_ELLIPSE_SPACING = 20.0
FILE_GROUP_SPACING = 40.0
FILE_ELLIPSE_BASE_OFFSET = 75.0
FILE_GROUP_PADDING = 10.0
TEXT_RIGHT_OFFSET = 5.0
TEXT_LEFT_OFFSET = -5.0

NODE_COLOR = "#1e1e1e"
ARROW_COLOR = "#1e1e1e"
ORDERED_COLUMN_COLOR = "#1e90ff"
ORANGE_COLOR = "#f08c00"
PURPLE_MODE_COLOR = "#9b59b6"
DARK_RED_COLOR = "#8b0000"
ERROR_COLOR = "#ff0000"
TRANSPARENT = "transparent"
BACKGROUND_COLOR = "#ffffff"

MAX_ARROWS_WITHOUT_ELLIPSIS = 8
ARROWS_BEFORE_ELLIPSIS = 2
ARROWS_AFTER_ELLIPSIS = 2
MIN_ARROW_SPACING = 20.0
CENTRAL_REGION_RATIO = 0.6
MAX_ARROWS_IN_CENTRAL_REGION = 4

DETAILS_FONT_SIZE = 14
FILE_LABEL_FONT_SIZE = 20
COLUMN_LABEL_FONT_SIZE = 14
ELLIPSIS_FONT_SIZE = 14
HASH_TABLE_FONT_SIZE = 16

OPERATOR_TEXT_HEIGHT = 25.0
DETAILS_LINE_HEIGHT = 17.5
COLUMN_LABEL_HEIGHT = 17.5

FONT_FAMILY_NORMAL = 6
FONT_FAMILY_BOLD = 7

STROKE_WIDTH = 1
OPACITY = 100
ROUGHNESS = 0
LINE_HEIGHT = 1.25
RECTANGLE_ROUNDNESS_TYPE = 3
ARROW_ROUNDNESS_TYPE = 2

HASH_TABLE_WIDTH = 138.0
HASH_TABLE_HEIGHT = 41.0
HASH_TABLE_Y_OFFSET = 70.0

DYNAMIC_FILTER_WIDTH = 120.0
DYNAMIC_FILTER_HEIGHT = 30.0
DYNAMIC_FILTER_Y_OFFSET = 50.0

EXCALIDRAW_SOURCE = "https://excalidraw.com"
EXCALIDRAW_VERSION = 2
