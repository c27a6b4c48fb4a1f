"""Zone resolution and name matching tests."""

from shipquote.services.domain import Zone
from shipquote.services.matching import names_match, normalize_name
from shipquote.services.zones import resolve_zone, subdivision_code


class TestNormalization:
    def test_strips_diacritics_and_case(self):
        assert normalize_name("  Ñuñoa ") == "nunoa"
        assert normalize_name("Valparaíso") == "valparaiso"

    def test_empty(self):
        assert normalize_name("") == ""

    def test_containment_both_ways(self):
        assert names_match("Ñuñoa", "nunoa")
        assert names_match("Las Condes", "Las Condes, Santiago")
        assert names_match("Viña del Mar, Valparaíso", "vina del mar")

    def test_no_match(self):
        assert not names_match("Maipú", "Providencia")

    def test_empty_never_matches(self):
        assert not names_match("", "Providencia")
        assert not names_match("Providencia", "")


class TestSubdivisionCode:
    def test_known_names(self):
        assert subdivision_code("Región Metropolitana de Santiago") == "RM"
        assert subdivision_code("Santiago") == "RM"
        assert subdivision_code("Bio Bio") == "VIII"

    def test_variant_spelling(self):
        assert subdivision_code("valparaiso") == "V"
        assert subdivision_code("Region Metropolitana de Santiago") == "RM"

    def test_unknown_passes_through(self):
        assert subdivision_code("XIV") == "XIV"


class TestResolveZone:
    zones = [
        Zone(code="V", name="Valparaíso"),
        Zone(code="RM", name="Región Metropolitana"),
        Zone(code="VIII", name="Biobío"),
    ]

    def test_maps_name_to_code(self):
        assert resolve_zone(self.zones, "Santiago Metropolitan").code == "RM"

    def test_raw_code(self):
        assert resolve_zone(self.zones, "VIII").code == "VIII"

    def test_name_containment(self):
        zones = [Zone(code="north", name="Norte Grande"), Zone(code="south", name="Zona Sur")]
        assert resolve_zone(zones, "zona sur").code == "south"

    def test_defaults_to_first_zone(self):
        assert resolve_zone(self.zones, "Atlantis").code == "V"

    def test_empty_zone_list(self):
        assert resolve_zone([], "Santiago") is None
