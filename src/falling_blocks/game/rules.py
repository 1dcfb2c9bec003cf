from __future__ import annotations

import numbers
from dataclasses import dataclass


def _require_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int] = (100, 300, 500, 800)
    lines_per_level: int = 10
    base_drop_ms: int = 1000
    drop_step_ms: int = 100
    min_drop_ms: int = 100

    def score_for_lines(self, lines: int, level: int = 1) -> int:
        _require_int("lines_cleared", lines)
        _require_int("level", level)
        if lines == 0:
            return 0
        if level < 1:
            raise ValueError(f"level must be >= 1, got {level}")
        if 1 <= lines <= len(self.line_clear_scores):
            return self.line_clear_scores[lines - 1] * level
        # No table entry beyond a four-line clear
        raise ValueError(f"lines_cleared must be between 0 and {len(self.line_clear_scores)}, got {lines}")

    def level_for_lines(self, total_lines: int) -> int:
        _require_int("total lines cleared", total_lines)
        if total_lines < 0:
            raise ValueError(f"total lines cleared must be >= 0, got {total_lines}")
        return total_lines // self.lines_per_level + 1

    def drop_speed_ms(self, level: int) -> int:
        _require_int("level", level)
        if level < 1:
            raise ValueError(f"level must be >= 1, got {level}")
        return max(self.min_drop_ms, self.base_drop_ms - (level - 1) * self.drop_step_ms)


DEFAULT_RULES = ScoringRules()


def calculate_score(lines_cleared: int, level: int) -> int:
    return DEFAULT_RULES.score_for_lines(lines_cleared, level)


def calculate_level(total_lines_cleared: int) -> int:
    return DEFAULT_RULES.level_for_lines(total_lines_cleared)


def get_drop_speed(level: int) -> int:
    """Gravity interval in milliseconds for `level`."""
    return DEFAULT_RULES.drop_speed_ms(level)
