"""Exponential-decay indicators feeding the C3 score.

Each maps a non-negative count onto [0, 1). The decay constants are
calibrated against existing reports and must stay exactly as written.
"""

from math import exp

CHANGE_FREQUENCY_DECAY = 2.3025
LINES_CHANGED_DECAY = 0.05756
MAX_CCN_DECAY = 0.092103


def change_frequency_indicator(num_changes: int, days: int) -> float:
    return 1 - exp((-CHANGE_FREQUENCY_DECAY * num_changes) / float(days))


def lines_changed_indicator(lines_changed: int, days: int) -> float:
    return 1 - exp((-LINES_CHANGED_DECAY * lines_changed) / float(days))


def max_ccn_indicator(max_ccn: int) -> float:
    return 1 - exp(-MAX_CCN_DECAY * max_ccn)
