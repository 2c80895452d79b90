"""
Execution Context
=================
Detects whether code runs in a server process or inside a browser runtime.
"""

import sys

# Pyodide and other WebAssembly builds that run inside a browser tab
BROWSER_PLATFORMS = ("emscripten",)


def is_server_side() -> bool:
    """False when running in a browser, where secrets would reach the client."""
    if sys.platform in BROWSER_PLATFORMS:
        return False
    # Either Pyodide module means a browser runtime
    if "js" in sys.modules or "pyodide" in sys.modules:
        return False
    return True
