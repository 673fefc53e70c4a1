"""Export services."""

from .geojson import path_coordinates, tour_to_feature

__all__ = ["path_coordinates", "tour_to_feature"]
