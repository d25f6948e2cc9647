"""
Serverless entry point.

The @vercel/python runtime imports this file and serves the `app` ASGI
application. All requests are routed here by vercel.json.

The project root is added to sys.path at module level so that
`lifecycle_engine` resolves without an installed package.
"""

import sys
import os

_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if _root not in sys.path:
    sys.path.insert(0, _root)

# The runtime looks for `app` at module level
from lifecycle_engine.main import app  # noqa: E402,F401
