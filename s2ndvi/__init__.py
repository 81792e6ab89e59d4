"""Sentinel-2 archive extraction, band discovery and NDVI raster computation."""

__version__ = "0.1.0"
__all__ = ["bands", "extract", "ndvi", "operation", "processor", "raster"]