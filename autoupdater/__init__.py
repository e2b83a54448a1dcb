"""
autoupdater - keep a local checkout in sync with its upstream branch.
"""

__version__ = "0.1.0"
__logo__ = "🔄"
