#!/usr/bin/env python3
"""FocusLoop entry point.

Run with:
    python main.py
    python -m focusloop
"""

from focusloop.__main__ import main


if __name__ == "__main__":
    main()
