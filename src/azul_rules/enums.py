from enum import Enum


class TileColor(str, Enum):
    BLUE = "blue"
    YELLOW = "yellow"
    RED = "red"
    BLACK = "black"
    CYAN = "cyan"


class Marker(str, Enum):
    STARTING = "starter"


class GamePhase(str, Enum):
    DRAFT = "draft"
    TILING = "tiling"
    ROUND_PREP = "round_prep"
    GAME_OVER = "game_over"


class WallVariant(str, Enum):
    STANDARD = "standard"
    GRAY = "gray"
