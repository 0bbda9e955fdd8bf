import pytest

from core import regions


@pytest.mark.parametrize("lat, lon, district", [
    (-7.60, 110.37, regions.SLEMAN),
    # Sleman band is checked before the city box
    (-7.74, 110.38, regions.SLEMAN),
    (-7.80, 110.38, regions.KOTA_YOGYAKARTA),
    (-7.80, 110.30, regions.BANTUL),
    (-7.95, 110.50, regions.BANTUL),
    (-8.20, 110.10, regions.GUNUNGKIDUL),
    (-7.50, 110.15, regions.KULON_PROGO),
    (-7.45, 110.60, None),
])
def test_classify_district(lat, lon, district):
    assert regions.classify_district(lat, lon) == district


def test_tables_cover_every_district():
    districts = {
        regions.SLEMAN, regions.GUNUNGKIDUL, regions.KULON_PROGO,
        regions.BANTUL, regions.KOTA_YOGYAKARTA,
    }
    assert set(regions.SOIL_COMPOSITION) == districts
    assert set(regions.POPULATION_DENSITY) == districts
    for composition in regions.SOIL_COMPOSITION.values():
        assert sum(composition.values()) == pytest.approx(1.0)


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        regions.POPULATION_DENSITY["Sleman"] = 1


def test_zone_predicates():
    assert regions.is_merapi_slope(-7.50, 110.45)
    assert not regions.is_merapi_slope(-7.50, 110.40)
    assert regions.is_gunungkidul_karst(-8.00, 110.60)
    assert regions.is_gunungkidul_dryland(-8.00, 110.20)
    assert not regions.is_gunungkidul_karst(-8.00, 110.20)
    assert regions.is_menoreh_hills(-7.70, 110.15)
    assert not regions.is_menoreh_hills(-7.95, 110.15)
    assert regions.is_urban_core(-7.78, 110.37)
    assert regions.is_agricultural_band(-7.80, 110.30)


def test_slope_zone_order():
    assert regions.slope_zone(-7.50, 110.45) == "Lereng Merapi"
    assert regions.slope_zone(-8.00, 110.60) == "Gunungkidul Karst"
    assert regions.slope_zone(-7.70, 110.15) == "Perbukitan Menoreh"
    assert regions.slope_zone(-7.78, 110.37) == "Kota Yogyakarta"
    assert regions.slope_zone(-7.90, 110.30) == "Dataran Rendah"


def test_vegetation_zone_order():
    # Dryland wins over every zone except Merapi
    assert regions.vegetation_zone(-8.00, 110.30) == "Lahan Kering Gunungkidul"
    assert regions.vegetation_zone(-7.65, 110.30) == "Sawah Irigasi"
