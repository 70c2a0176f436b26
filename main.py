#!/usr/bin/env python3
"""droplet — entry point.

Run with:
    python main.py
    python -m droplet
"""

from droplet.__main__ import main


if __name__ == "__main__":
    main()
