"""
Regional lookup tables for DIY Yogyakarta.

Static district tables (soil composition, population density) and the
zone predicates that stand in for a real geospatial model. Everything
here is immutable module data.
"""

from types import MappingProxyType
from typing import Mapping, Optional


# ═══════════════════════════════════════════════════════════════════════════
# DISTRICT TABLES
# ═══════════════════════════════════════════════════════════════════════════
SLEMAN = "Sleman"
GUNUNGKIDUL = "Gunungkidul"
KULON_PROGO = "Kulon Progo"
BANTUL = "Bantul"
KOTA_YOGYAKARTA = "Kota Yogyakarta"

# Share of each soil type per district
SOIL_COMPOSITION: Mapping[str, Mapping[str, float]] = MappingProxyType({
    SLEMAN: MappingProxyType({
        "Andosol (Vulkanik)": 0.65,
        "Latosol": 0.25,
        "Aluvial": 0.10,
    }),
    GUNUNGKIDUL: MappingProxyType({
        "Grumusol (Liat Kapur)": 0.70,
        "Mediteran": 0.20,
        "Latosol": 0.10,
    }),
    KULON_PROGO: MappingProxyType({
        "Mediteran": 0.60,
        "Latosol": 0.30,
        "Aluvial": 0.10,
    }),
    BANTUL: MappingProxyType({
        "Latosol": 0.50,
        "Grumusol (Liat Kapur)": 0.30,
        "Aluvial": 0.20,
    }),
    KOTA_YOGYAKARTA: MappingProxyType({
        "Aluvial": 0.80,
        "Latosol": 0.20,
    }),
})

# People per km² (BPS)
POPULATION_DENSITY: Mapping[str, int] = MappingProxyType({
    KOTA_YOGYAKARTA: 11562,
    SLEMAN: 2052,
    BANTUL: 2024,
    GUNUNGKIDUL: 506,
    KULON_PROGO: 763,
})


def classify_district(lat: float, lon: float) -> Optional[str]:
    """
    Map a coordinate to one of the five districts.

    Bands are checked in order, so the Sleman latitude band wins over the
    city box and Kulon Progo only catches what the latitude bands miss.
    """
    if -7.75 < lat < -7.55:
        return SLEMAN
    if -7.85 < lat < -7.75 and 110.35 < lon < 110.42:
        return KOTA_YOGYAKARTA
    if -8.00 < lat < -7.75:
        return BANTUL
    if lat < -8.00:
        return GUNUNGKIDUL
    if lon < 110.25:
        return KULON_PROGO
    return None


# ═══════════════════════════════════════════════════════════════════════════
# ZONE PREDICATES
# ═══════════════════════════════════════════════════════════════════════════
def is_merapi_slope(lat: float, lon: float) -> bool:
    """Active volcano flank north of the city."""
    return -7.60 < lat < -7.40 and lon > 110.42


def is_gunungkidul_karst(lat: float, lon: float) -> bool:
    """Karst highland in the southeast."""
    return lat < -7.95 and lon > 110.45


def is_gunungkidul_dryland(lat: float, lon: float) -> bool:
    return lat < -7.95


def is_menoreh_hills(lat: float, lon: float) -> bool:
    """Western hill range (Kulon Progo)."""
    return lon < 110.25 and lat > -7.90


def is_urban_core(lat: float, lon: float) -> bool:
    return -7.80 < lat < -7.75 and 110.35 < lon < 110.42


def is_agricultural_band(lat: float, lon: float) -> bool:
    return -7.85 < lat < -7.75 and 110.25 < lon < 110.35


# Representative slope per zone, degrees
SLOPE_ZONES: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "Lereng Merapi": MappingProxyType({"min": 15, "max": 40, "avg": 28}),
    "Gunungkidul Karst": MappingProxyType({"min": 10, "max": 35, "avg": 22}),
    "Perbukitan Menoreh": MappingProxyType({"min": 12, "max": 30, "avg": 21}),
    "Dataran Rendah": MappingProxyType({"min": 2, "max": 8, "avg": 5}),
    "Kota Yogyakarta": MappingProxyType({"min": 1, "max": 5, "avg": 3}),
})

# Representative NDVI per zone
NDVI_ZONES: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "Hutan Lereng Merapi": MappingProxyType({"min": 0.6, "max": 0.8, "avg": 0.72}),
    "Lahan Pertanian": MappingProxyType({"min": 0.4, "max": 0.7, "avg": 0.55}),
    "Permukiman Kota": MappingProxyType({"min": 0.1, "max": 0.3, "avg": 0.22}),
    "Lahan Kering Gunungkidul": MappingProxyType({"min": 0.2, "max": 0.4, "avg": 0.31}),
    "Sawah Irigasi": MappingProxyType({"min": 0.5, "max": 0.8, "avg": 0.65}),
})


def slope_zone(lat: float, lon: float) -> str:
    """Name of the slope zone a coordinate falls in."""
    if is_merapi_slope(lat, lon):
        return "Lereng Merapi"
    if is_gunungkidul_karst(lat, lon):
        return "Gunungkidul Karst"
    if is_menoreh_hills(lat, lon):
        return "Perbukitan Menoreh"
    if is_urban_core(lat, lon):
        return "Kota Yogyakarta"
    return "Dataran Rendah"


def vegetation_zone(lat: float, lon: float) -> str:
    """Name of the NDVI zone a coordinate falls in."""
    if is_merapi_slope(lat, lon):
        return "Hutan Lereng Merapi"
    if is_gunungkidul_dryland(lat, lon):
        return "Lahan Kering Gunungkidul"
    if is_urban_core(lat, lon):
        return "Permukiman Kota"
    if is_agricultural_band(lat, lon):
        return "Lahan Pertanian"
    return "Sawah Irigasi"
