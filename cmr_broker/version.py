"""
Version information for cmr-search-broker package.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cmr-search-broker")
except PackageNotFoundError:
    # Package is not installed
    __version__ = "0.0.0+unknown"
