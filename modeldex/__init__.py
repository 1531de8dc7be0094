"""Adaptive asset cache and render-quality scheduling for scrolling 3D model lists."""

__version__ = '0.1.0'
