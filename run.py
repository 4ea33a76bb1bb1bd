#!/usr/bin/env python3
"""Convenience runner for the route ETA monitor.

Usage:
    python run.py [--once] [--no-server]
"""
import logging
from route_monitor.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    raise SystemExit(main())
