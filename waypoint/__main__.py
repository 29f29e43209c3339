"""Allows `python -m waypoint` to start the server."""

from waypoint.main import run

run()
