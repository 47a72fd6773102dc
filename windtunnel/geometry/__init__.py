from windtunnel.geometry.analysis import GeometryAnalysis, analyze_geometry
from windtunnel.geometry.classify import ShapeType, classify_shape
from windtunnel.geometry.polygon import BoundingBox, bounding_box, centroid, polygon_area, rotate

__all__ = [
    "BoundingBox",
    "GeometryAnalysis",
    "ShapeType",
    "analyze_geometry",
    "bounding_box",
    "centroid",
    "classify_shape",
    "polygon_area",
    "rotate",
]
