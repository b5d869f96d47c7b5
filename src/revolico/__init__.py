"""
Revolico GTM — marketplace listings backed by a single shared Gist.

Every visitor reads the catalog anonymously. Only the admin,
holding the upstream token, writes it back. No server in between.
"""

import os

__version__ = "0.1.0"
__author__ = "Revolico GTM"

REVOLICO_HOME = os.environ.get("REVOLICO_HOME", "~/.revolico")
