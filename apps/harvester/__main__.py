"""
Harvester Module Entry Point

Allows execution via: python -m apps.harvester [probe]

Delegates to the runner for both modes.
"""

from apps.harvester.runner import run

if __name__ == "__main__":
    run()
