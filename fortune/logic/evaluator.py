"""Line-win evaluation over a populated grid."""
from collections.abc import Sequence

from fortune.errors import ConfigurationError
from fortune.logic.models import Grid, Line, WinResult


class LineEvaluator:
    """Checks every configured line for an exact symbol-id match."""

    def __init__(self, lines: Sequence[Line]):
        if not lines:
            raise ConfigurationError("Line evaluator needs at least one line.")
        for line in lines:
            if len(line.cells) < 2:
                raise ConfigurationError(f"Line {line.id!r} needs at least two cells.")
        self.lines = tuple(lines)

    def evaluate(self, grid: Grid) -> list[WinResult]:
        """
        Return one WinResult per winning line, in line order.

        Pure: depends only on the grid and the line set. All lines are
        checked; several may win on the same spin.
        """
        wins: list[WinResult] = []
        for line in self.lines:
            symbols = [self._cell(grid, line, column, row) for column, row in line.cells]
            first = symbols[0]
            if all(s.id == first.id for s in symbols[1:]):
                wins.append(
                    WinResult(
                        symbol=first,
                        line_id=line.id,
                        payout_weight=line.payout_weight,
                    )
                )
        return wins

    @staticmethod
    def _cell(grid: Grid, line: Line, column: int, row: int):
        try:
            return grid[column][row]
        except IndexError:
            raise ConfigurationError(
                f"Line {line.id!r} reads cell ({column}, {row}) outside the grid."
            ) from None
