"""GeoPeek - Terminal previewer for geographic vector data"""

__version__ = "0.1.0"
__author__ = "GeoPeek Team"
__description__ = "Preview GeoJSON, WKT, CSV and other map files as text right in the terminal"

# Import main entry point
from .main import main

__all__ = ['main']
