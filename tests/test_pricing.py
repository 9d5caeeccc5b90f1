import pytest

import printbay.services.pricing as pricing_engine
from printbay.client.simulation import SimulationService
from printbay.schemas.analysis import Dimensions
from printbay.services.pricing import (
    SERVICE_FEE,
    calculate_quote,
    complexity_factor,
    pricing_options,
)
from printbay.utils.hashing import format_number, js_string_hash, pricing_seed


def test_js_string_hash_matches_known_values():
    assert js_string_hash("") == 0
    assert js_string_hash("a") == 97
    assert js_string_hash("ab") == 97 * 31 + 98
    assert js_string_hash("hello") == 99162322
    # wraps to a signed 32-bit value
    assert js_string_hash("hello world, this overflows") < 2 ** 31


def test_volume_rendered_like_a_template_string():
    assert format_number(12.0) == "12"
    assert format_number(45.2) == "45.2"
    assert pricing_seed(12.0, "pla", "draft", "white") == pricing_seed(12, "pla", "draft", "white")


@pytest.mark.parametrize(
    "seed,expected",
    [(0, 1.0), (30, 1.0), (31, 1.2), (70, 1.2), (71, 1.5), (-85, 1.5), (199, 1.5), (-1234, 1.2)],
)
def test_complexity_buckets(seed, expected):
    assert complexity_factor(seed) == expected


def test_identical_inputs_give_identical_quotes():
    a = calculate_quote(volume=12.5, material="tough-resin", quality="high", color="red")
    b = calculate_quote(volume=12.5, material="tough-resin", quality="high", color="red")
    assert a.breakdown == b.breakdown
    assert a.delivery == b.delivery
    assert a.material == b.material


def test_totals_add_up():
    q = calculate_quote(volume=8, material="pla", quality="standard", color="blue")
    b = q.breakdown
    assert b.service_fee == SERVICE_FEE
    assert b.total == pytest.approx(b.subtotal + b.service_fee + b.tax, abs=0.02)
    assert b.tax == pytest.approx(b.subtotal * 0.0875, abs=0.01)


def test_unknown_material_and_quality_use_defaults():
    volume = 10.0
    q = calculate_quote(volume=volume, material="unobtainium", quality="mystery", color="white")
    c = complexity_factor(pricing_seed(volume, "unobtainium", "mystery", "white"))
    assert q.breakdown.material_cost == pytest.approx(round(volume * 0.15 * 1.0 * c, 2), abs=0.01)
    assert q.breakdown.color_premium == 0


def test_tall_part_needs_supports():
    q = calculate_quote(volume=5, material="pla", quality="draft", color="white",
                        dimensions=Dimensions(x=10, y=10, z=40))
    assert q.material.supports_required is True
    assert q.material.waste_percentage == 18
    assert q.breakdown.support_cost >= 4.50
    assert q.delivery.estimated_days == 5


def test_ultra_quality_post_processing_and_lead_time():
    q = calculate_quote(volume=2, material="clear-resin", quality="ultra", color="clear")
    assert q.breakdown.post_processing_cost == 6.00
    assert q.delivery.estimated_days == 8
    assert q.delivery.rush_available is True
    assert q.delivery.rush_cost == 19.99
    assert q.material.estimated_weight == 2.4


def test_missing_volume_uses_typical_part():
    q = calculate_quote(volume=None)
    assert q.volume == 45.2
    assert q.material.supports_required is True  # over 20 cm³


def test_options_catalog():
    opts = pricing_options()
    assert {m.material_type for m in opts.materials} >= {"standard-resin", "pla", "tpu"}
    assert [q.name for q in opts.qualities] == ["draft", "standard", "high", "ultra"]
    categories = {c.value: c.category for c in opts.colors}
    assert categories["white"] == "standard"
    assert categories["red"] == "premium"
    assert categories["gold-glitter"] == "special"
    assert opts.delivery_options["rush"].fee == 39.99


def test_pricing_endpoint_saves_and_returns_quote(client):
    r = client.post(
        "/api/pricing-calculate",
        json={"volume": 12.5, "material": "tough-resin", "quality": "high", "color": "red", "orderId": "TPB-1"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["pricingId"] == body["id"]
    assert body["orderId"] == "TPB-1"
    assert body["breakdown"]["postProcessingCost"] == 3.5
    assert body["delivery"]["estimatedDays"] == 6


def test_pricing_options_endpoint(mock_client):
    r = mock_client.get("/api/pricing-calculate")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["deliveryOptions"]["standard"]["days"] == 7
    assert body["materials"][0]["materialType"] == "standard-resin"


def test_invalid_body_is_400(mock_client):
    r = mock_client.post("/api/pricing-calculate", json={"volume": -3})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["details"]


@pytest.mark.asyncio
async def test_offline_quote_matches_api_quote(mock_client):
    api = mock_client.post(
        "/api/pricing-calculate",
        json={"volume": 12.5, "material": "tough-resin", "quality": "high", "color": "red"},
    ).json()

    sim = SimulationService(delay_scale=0)
    offline = await sim.calculate_pricing({"volume": 12.5}, "tough-resin", "high", "red")

    assert offline["breakdown"] == api["breakdown"]
    assert offline["delivery"] == api["delivery"]
    assert offline["material"] == api["material"]


def test_identical_quotes_in_the_same_millisecond_are_both_saved(client, monkeypatch):
    monkeypatch.setattr(pricing_engine, "now_ms", lambda: 1700000012345)
    body = {"volume": 12.5, "material": "pla", "quality": "draft", "color": "white"}

    first = client.post("/api/pricing-calculate", json=body)
    second = client.post("/api/pricing-calculate", json=body)
    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["pricingId"] != second.json()["pricingId"]
    assert first.json()["breakdown"] == second.json()["breakdown"]
