"""Entry point for `python -m selfheal`.

Usage:
    python -m selfheal
"""

from __future__ import annotations

import asyncio

from selfheal.app import main

asyncio.run(main())
