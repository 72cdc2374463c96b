"""Canonical focus-cycle lengths shared by the API and the timer client."""

POMODORO_SECONDS = 25 * 60
SHORT_BREAK_SECONDS = 5 * 60
LONG_BREAK_SECONDS = 15 * 60

# a long break replaces the short one after every Nth work interval
POMODOROS_BEFORE_LONG_BREAK = 4
