"""
OpenStreetMap land cover via the Overpass API.

Counts feature tags within 500 m of a point and maps the most frequent
one to a land cover label. No caching here (the aggregator caches whole
snapshots) and no retry.
"""

from collections import Counter
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
from dataclasses import dataclass
import logging
import requests

from core.errors import ConfigurationError, UpstreamFailure

log = logging.getLogger(__name__)

SOURCE_NAME = "OpenStreetMap Overpass"
DEFAULT_LAND_COVER = "Area Terbuka"

# Tags whose value is counted (e.g. landuse=forest counts "forest")
VALUE_TAGS = ("landuse", "natural", "leisure")
# Tags counted under their own key (any building counts "building")
PRESENCE_TAGS = ("water", "building", "highway")

# Shortcuts checked before the general table
DIRECT_LAND_COVER: Mapping[str, str] = MappingProxyType({
    "building": "Permukiman",
    "residential": "Permukiman",
    "farmland": "Lahan Pertanian",
    "orchard": "Lahan Pertanian",
    "forest": "Hutan",
    "wood": "Hutan",
    "water": "Badan Air",
})

OSM_LAND_USE: Mapping[str, str] = MappingProxyType({
    "residential": "Permukiman",
    "commercial": "Komersial",
    "industrial": "Industri",
    "farmland": "Lahan Pertanian",
    "farmyard": "Halaman Ternak",
    "forest": "Hutan",
    "meadow": "Padang Rumput",
    "grass": "Rumput",
    "vineyard": "Kebun Anggur",
    "orchard": "Kebun Buah",
    "allotments": "Lahan Kebun",
    "recreation_ground": "Rekreasi",
    "village_green": "Lapangan Desa",
    "cemetery": "Pemakaman",
    "military": "Militer",
    "quarry": "Tambang",
    "railway": "Rel Kereta",
    "brownfield": "Lahan Terbengkalai",
    "greenfield": "Lahan Hijau",
    "landfill": "TPA",
    "construction": "Konstruksi",
})


@dataclass(frozen=True)
class LandCoverResult:
    """Land cover classification for a location."""
    latitude: float
    longitude: float
    land_cover: str
    dominant_tag: str
    feature_count: int
    tag_counts: Tuple[Tuple[str, int], ...]
    data_source: str = SOURCE_NAME


def map_osm_land_use(tag: str) -> str:
    return OSM_LAND_USE.get(tag, DEFAULT_LAND_COVER)


def land_cover_for_tag(tag: str) -> str:
    """Label for the dominant OSM tag."""
    if tag in DIRECT_LAND_COVER:
        return DIRECT_LAND_COVER[tag]
    return map_osm_land_use(tag)


def tally_tags(elements: List[Dict]) -> Counter:
    """Count land-related tags across Overpass elements, in first-seen order."""
    counts: Counter = Counter()
    for element in elements:
        tags = element.get("tags") or {}
        for key in VALUE_TAGS:
            if tags.get(key):
                counts[tags[key]] += 1
        for key in PRESENCE_TAGS:
            if tags.get(key):
                counts[key] += 1
    return counts


def dominant_tag(counts: Counter) -> str:
    """
    Most frequent tag.

    Ties go to the tag seen later, so iteration order matters.
    """
    best_tag, best_count = None, -1
    for tag, count in counts.items():
        if count >= best_count:
            best_tag, best_count = tag, count
    return best_tag


class OSMLoader:
    """
    Land cover from OpenStreetMap via Overpass.

    Queries ways tagged landuse, natural, leisure, highway, building
    and water around the point.
    """

    RADIUS_METERS = 500
    TIMEOUT_SECONDS = 10
    QUERY_TIMEOUT_SECONDS = 25

    def __init__(self, overpass_url: Optional[str], session: Optional[requests.Session] = None):
        self.overpass_url = overpass_url
        self.session = session or requests.Session()

    def _build_query(self, lat: float, lon: float, radius: int) -> str:
        """Build the Overpass QL query."""
        around = f"(around:{radius},{lat},{lon})"
        ways = "\n".join(
            f'          way["{key}"]{around};'
            for key in ("landuse", "natural", "leisure", "highway", "building", "water")
        )
        return f"""
        [out:json][timeout:{self.QUERY_TIMEOUT_SECONDS}];
        (
{ways}
        );
        out body;
        >;
        out skel qt;
        """

    def fetch_raw(self, lat: float, lon: float, radius: Optional[int] = None) -> Dict:
        """POST the query and return the decoded JSON."""
        if not self.overpass_url:
            raise ConfigurationError(SOURCE_NAME, "Overpass API URL not configured")

        query = self._build_query(lat, lon, radius or self.RADIUS_METERS)
        try:
            response = self.session.post(
                self.overpass_url,
                data=query,
                headers={"Content-Type": "text/plain"},
                timeout=self.TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            log.error(f"Overpass request timed out for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"timed out after {self.TIMEOUT_SECONDS}s") from e
        except (requests.RequestException, ValueError) as e:
            log.error(f"Overpass request failed for ({lat}, {lon}): {e}")
            raise UpstreamFailure(SOURCE_NAME, f"request failed: {e}") from e

    def fetch_land_cover(self, lat: float, lon: float) -> LandCoverResult:
        """
        Classify land cover around a point.

        Raises:
            ConfigurationError: OVERPASS_URL is not set
            UpstreamFailure: request failed, or no features were found
        """
        data = self.fetch_raw(lat, lon)
        elements = (data.get("elements") if isinstance(data, dict) else None) or []

        counts = tally_tags(elements)
        if not counts:
            # No imagery source is wired in to classify empty areas
            raise UpstreamFailure(
                SOURCE_NAME,
                f"no land cover features within {self.RADIUS_METERS}m and no imagery fallback configured",
            )

        tag = dominant_tag(counts)
        land_cover = land_cover_for_tag(tag)
        log.debug(f"Land cover at ({lat:.4f}, {lon:.4f}): {land_cover} (tag={tag}, n={counts[tag]})")

        return LandCoverResult(
            latitude=lat,
            longitude=lon,
            land_cover=land_cover,
            dominant_tag=tag,
            feature_count=len(elements),
            tag_counts=tuple(counts.items()),
        )
