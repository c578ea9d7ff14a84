"""
Exposes the version of topocoords
"""
__version__ = 'v0.1.0'
