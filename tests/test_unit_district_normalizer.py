from dataclasses import dataclass
from typing import Optional

from app.config import DISTRICT_SETTINGS
from app.services.district_normalizer import matches_district_filter, normalize_district


@dataclass
class Location:
    district_raw: Optional[str] = None
    city_raw: Optional[str] = None
    address_raw: Optional[str] = None


def test_explicit_district_wins_and_is_uppercased():
    assert normalize_district(Location(district_raw="  Patna ", city_raw="Gaya")) == "PATNA"


def test_falls_back_to_city_then_address_tail():
    assert normalize_district(Location(district_raw="", city_raw="gaya")) == "GAYA"
    assert normalize_district(Location(address_raw="12 Boring Road, Sri Krishna Puri, Patna")) == "PATNA"


def test_no_location_means_no_district():
    assert normalize_district(Location()) is None
    assert normalize_district(Location(address_raw="   ")) is None


def test_short_first_candidate_yields_no_district():
    # first non-empty candidate decides; later strategies are not consulted
    assert len("P") < int(DISTRICT_SETTINGS["min_name_length"])
    assert normalize_district(Location(district_raw="P", city_raw="Patna")) is None


def test_filter_matches_district_city_or_address():
    assert matches_district_filter(Location(district_raw="Patna"), "patna")
    assert matches_district_filter(Location(district_raw="Nalanda", city_raw="Patna"), "PATNA")
    assert matches_district_filter(Location(address_raw="Near Gandhi Maidan, Patna 800001"), "Patna")
    assert not matches_district_filter(Location(district_raw="Gaya"), "Patna")
