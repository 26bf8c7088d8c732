"""Lifecycle states shared by competitions and games"""

UPCOMING = "UPCOMING"
LIVE = "LIVE"
FINISHED = "FINISHED"

STATUSES = (UPCOMING, LIVE, FINISHED)
