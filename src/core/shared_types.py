"""
Type definitions used across layers
"""

from enum import StrEnum


class Phase(StrEnum):
    SETUP = "SETUP"
    DRAFT = "DRAFT"
    PLACEMENT = "PLACEMENT"
    GAME_OVER = "GAME_OVER"


class StockMode(StrEnum):
    SINGLETON = "singleton"
    UNLIMITED = "unlimited"


class PatternKind(StrEnum):
    LINE = "line"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    TERRITORY = "territory"
