"""
Soil type from the district soil composition table.
"""

from dataclasses import dataclass

from core import regions
from core.errors import ClassificationFailure

SOURCE_NAME = "DIY Soil Database (Real Data)"


@dataclass(frozen=True)
class SoilResult:
    soil_type: str
    share: float
    district: str
    data_source: str = SOURCE_NAME


def get_soil_type(lat: float, lon: float) -> SoilResult:
    """
    Dominant soil type for the coordinate's district.

    Raises:
        ClassificationFailure: coordinate is in no known district
    """
    district = regions.classify_district(lat, lon)
    if district is None or district not in regions.SOIL_COMPOSITION:
        raise ClassificationFailure(SOURCE_NAME, "cannot determine soil type for this location")

    composition = regions.SOIL_COMPOSITION[district]
    soil_type = max(composition, key=composition.get)
    return SoilResult(soil_type=soil_type, share=composition[soil_type], district=district)
