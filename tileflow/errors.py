"""Exceptions raised by tileflow."""


class InvalidCoordinateError(ValueError):
    """Raised when a tile coordinate falls outside the grid."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Tile ({x}, {y}) is outside the {width}x{height} grid"
        )
