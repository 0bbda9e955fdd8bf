"""
Data loaders for the landslide risk engine.

Includes:
- Elevation (Open-Elevation API)
- Land cover (OpenStreetMap Overpass)
- Rainfall (OpenWeather)
- Soil type, slope and NDVI (regional tables)
- Population density (GeoNames, district table fallback)
- Reverse geocoding (Nominatim)
- Environmental aggregator (combines all sources)
"""

from loaders.elevation import ElevationLoader, ElevationResult
from loaders.osm import OSMLoader, LandCoverResult
from loaders.weather import WeatherLoader, RainfallResult
from loaders.soil import get_soil_type, SoilResult
from loaders.terrain import estimate_slope, get_ndvi, SlopeResult, VegetationResult
from loaders.demographics import DemographicsLoader, PopulationResult
from loaders.geocoder import Geocoder, format_full_address, format_display_lines
from loaders.unified import EnvironmentalAggregator

__all__ = [
    # Remote sources
    "ElevationLoader",
    "ElevationResult",
    "OSMLoader",
    "LandCoverResult",
    "WeatherLoader",
    "RainfallResult",
    "DemographicsLoader",
    "PopulationResult",
    # Table sources
    "get_soil_type",
    "SoilResult",
    "estimate_slope",
    "get_ndvi",
    "SlopeResult",
    "VegetationResult",
    # Address
    "Geocoder",
    "format_full_address",
    "format_display_lines",
    # Aggregate
    "EnvironmentalAggregator",
]
