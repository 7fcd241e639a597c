#!/usr/bin/env python3
"""Thin loader delegating to the interface layer."""

import sys

from core.interface import dome_app as _dome_app

if __name__ != "__main__":
    # When imported, expose the interface implementation directly.
    sys.modules[__name__] = _dome_app
else:
    sys.exit(_dome_app.main())
