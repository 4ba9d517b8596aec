"""Allow `python -m nodemate`."""

from nodemate.main import run

run()
