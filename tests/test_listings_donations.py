import importlib.util
import sys
import unittest
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_MISSING_PYDANTIC = importlib.util.find_spec("pydantic") is None

if not _MISSING_PYDANTIC:
    from agrihub.data.catalog import (
        EQUIPMENT_LIST,
        FARMER_CASES,
        LAND_LISTINGS,
        get_equipment,
        get_farmer_case,
        get_land,
    )
    from agrihub.domain.donations import (
        DEFAULT_AMOUNT,
        DonationForm,
        days_left,
        funding_progress,
    )
    from agrihub.domain.listings import (
        equipment_share_payload,
        filter_equipment,
        filter_land,
        format_inr,
        negotiate_land_price,
        negotiation_bounds,
        quote_rental,
    )


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class EquipmentFilterTests(unittest.TestCase):
    def test_catalog_sizes(self) -> None:
        self.assertEqual(len(EQUIPMENT_LIST), 5)
        self.assertEqual(len(LAND_LISTINGS), 6)
        self.assertEqual(len(FARMER_CASES), 3)

    def test_query_matches_name_or_type_case_insensitively(self) -> None:
        names = [item.name for item in filter_equipment(EQUIPMENT_LIST, "tractor")]
        self.assertEqual(names, ["John Deere 5045D Tractor", "Mahindra 575 DI Tractor"])
        by_type = filter_equipment(EQUIPMENT_LIST, "spraying")
        self.assertEqual([item.id for item in by_type], [5])

    def test_type_and_location_combine(self) -> None:
        results = filter_equipment(
            EQUIPMENT_LIST, "", equipment_type="Tractor", location="Telangana"
        )
        self.assertEqual([item.id for item in results], [2])

    def test_sentinels_keep_everything(self) -> None:
        self.assertEqual(len(filter_equipment(EQUIPMENT_LIST, None)), 5)

    def test_no_match_returns_empty_list(self) -> None:
        self.assertEqual(filter_equipment(EQUIPMENT_LIST, "drone"), [])


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class LandFilterTests(unittest.TestCase):
    def test_query_matches_title_or_location(self) -> None:
        self.assertEqual([item.id for item in filter_land(LAND_LISTINGS, "orchard")], [6])
        self.assertEqual([item.id for item in filter_land(LAND_LISTINGS, "guntur")], [1])

    def test_state_filter(self) -> None:
        ids = [item.id for item in filter_land(LAND_LISTINGS, None, "Telangana")]
        self.assertEqual(ids, [2, 4, 6])
        self.assertEqual(filter_land(LAND_LISTINGS, None, "Kerala"), [])


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class RentalAndNegotiationTests(unittest.TestCase):
    def test_rental_days_are_clamped(self) -> None:
        tractor = get_equipment(1)
        self.assertEqual(quote_rental(tractor, 100).days, 30)
        self.assertEqual(quote_rental(tractor, 0).days, 1)
        quote = quote_rental(get_equipment(3), "5")
        self.assertEqual(quote.total, 25000)
        self.assertEqual(quote.message, "Rental request sent for 5 days. Total: ₹25,000")

    def test_unparseable_days_fall_back_to_minimum(self) -> None:
        self.assertEqual(quote_rental(get_equipment(2), "a week").days, 2)

    def test_negotiation_bounds(self) -> None:
        self.assertEqual(negotiation_bounds(45000), (38250, 51750))

    def test_proposal_is_clamped_and_described(self) -> None:
        land = get_land(1)
        low = negotiate_land_price(land, 1000)
        self.assertEqual(low.value, 38250)
        self.assertEqual(low.percent, 15.0)
        self.assertEqual(low.direction, "below")
        self.assertEqual(low.tone, "warn")
        self.assertEqual(
            low.message, "Proposal sent: ₹38,250/acre/year (15.0% below asking price)"
        )
        high = negotiate_land_price(land, 47000)
        self.assertEqual(high.direction, "above")
        self.assertEqual(high.tone, "alert")
        self.assertEqual(high.percent, 4.4)

    def test_asking_price_is_neutral(self) -> None:
        result = negotiate_land_price(get_land(2))
        self.assertEqual(result.value, 38000)
        self.assertEqual(result.direction, "equal")
        self.assertEqual(result.tone, "neutral")
        self.assertEqual(result.message, "Contacting owner with original price...")

    def test_indian_digit_grouping(self) -> None:
        self.assertEqual(format_inr(1234567), "12,34,567")
        self.assertEqual(format_inr(999), "999")
        self.assertEqual(format_inr(100000), "1,00,000")
        self.assertEqual(format_inr(1500.5), "1,500.50")

    def test_share_payload(self) -> None:
        payload = equipment_share_payload(get_equipment(4), "https://example.org/equipment")
        self.assertEqual(payload.title, "Rent Rotavator Set")
        self.assertIn("Rangareddy, Telangana", payload.text)


@unittest.skipUnless(not _MISSING_PYDANTIC, "pydantic is not installed")
class DonationTests(unittest.TestCase):
    def test_progress_and_days_left(self) -> None:
        case = get_farmer_case(1)
        self.assertAlmostEqual(funding_progress(case), 70.0)
        self.assertEqual(days_left(case, today=date(2024, 5, 10)), 5)
        self.assertEqual(days_left(case, today=date(2024, 6, 1)), 0)

    def test_preset_then_manual_amount(self) -> None:
        form = DonationForm(get_farmer_case(2))
        self.assertEqual(form.amount, DEFAULT_AMOUNT)
        self.assertEqual(form.selected_preset, "1000")
        form.select_preset("5000")
        self.assertEqual(form.selected_preset, "5000")
        form.enter_amount("750")
        self.assertIsNone(form.selected_preset)
        receipt = form.donate()
        self.assertEqual(receipt.amount, 750.0)
        self.assertEqual(receipt.message, "Thank you for your generous donation of ₹750!")

    def test_unknown_preset_rejected(self) -> None:
        with self.assertRaises(ValueError):
            DonationForm(get_farmer_case(3)).select_preset("300")

    def test_non_finite_amount_counts_as_zero(self) -> None:
        form = DonationForm(get_farmer_case(1))
        for text in ("nan", "inf", "-Infinity", "ten"):
            form.enter_amount(text)
            self.assertEqual(form.numeric_amount, 0.0)


if __name__ == "__main__":
    unittest.main()
