"""
Tests for the FastAPI application.

Uses FastAPI's TestClient against an app built on a temporary data
directory.
"""

import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

from core import LandRegistryService, MarketDataCache
from utils.config import Config
from web.app import create_app


# =============================================================================
# Test Fixtures
# =============================================================================

def ppd_line(tid, price, transfer, ptype="S"):
    fields = [
        tid, str(price), f"{transfer} 00:00", "S10 5PR", ptype, "N", "F", "4", "",
        "CRIMICAR AVENUE", "", "SHEFFIELD", "SHEFFIELD", "SOUTH YORKSHIRE", "A", "A",
    ]
    return ",".join(f'"{f}"' for f in fields)


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "land-registry-price-paid-2022.csv").write_text(
        "\n".join([ppd_line("A1", 200000, "2022-03-01"), ppd_line("A2", 0, "2022-04-01")])
    )
    (tmp_path / "land-registry-price-paid-2023.csv").write_text(
        "\n".join([ppd_line("B1", 220000, "2023-03-01"), ppd_line("B2", 500000, "2023-05-01", "D")])
    )
    return tmp_path


@pytest.fixture
def client(data_dir):
    config = Config(data_dir=str(data_dir), trend_years=2)
    service = LandRegistryService(data_dir, cache=MarketDataCache(ttl_seconds=60))
    return TestClient(create_app(config=config, service=service))


@pytest.fixture
def score_body():
    return {
        "ask_price": 350000,
        "living_area": 108,
        "days_on_market": 21,
        "comparables": {
            "listed": [3800, 3900, 4000],
            "sold_30d": [3750, 3800],
            "sold_90d_band": [3700, 3800],
        },
        "road_sales_12m": 3,
        "total_road_properties": 50,
        "preference_weights": {"garden": 8},
    }


# =============================================================================
# Test: Health
# =============================================================================

class TestHealth:

    def test_root(self, client):
        assert client.get("/").json() == {"status": "ok"}

    def test_api_health(self, client):
        data = client.get("/api/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"


# =============================================================================
# Test: Score Property
# =============================================================================

class TestScoreProperty:

    def test_scores_observed_input(self, client, score_body):
        response = client.post("/api/score-property", json=score_body)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert 0 <= data["scores"]["overall"] <= 999
        assert data["metrics"]["s1"] is not None
        assert data["metrics"]["P"] == pytest.approx(0.8)
        assert data["synthetic"] is False
        assert data["preferences"]["declared"] == ["garden"]

    def test_synthetic_request(self, client):
        response = client.post(
            "/api/score-property",
            json={"ask_price": 350000, "living_area": 108, "synthetic": True},
        )
        data = response.json()

        assert data["synthetic"] is True
        assert data["metrics"]["coverage"] == 0.0

    def test_invalid_ask_price_is_400(self, client):
        response = client.post("/api/score-property", json={"ask_price": 0, "living_area": 100})
        assert response.status_code == 400

    def test_missing_field_is_422(self, client):
        response = client.post("/api/score-property", json={"living_area": 100})
        assert response.status_code == 422


# =============================================================================
# Test: Land Registry
# =============================================================================

class TestLandRegistry:

    def test_snapshots_for_area(self, client):
        response = client.post(
            "/api/land-registry",
            json={"postcode": "s10", "property_type": "S", "years": [2021, 2022, 2023]},
        )
        data = response.json()["data"]

        assert data["postcode"] == "S10"
        assert [s["year"] for s in data["snapshots"]] == [2022, 2023]
        assert data["year_over_year_growth"]["2022-2023"] == pytest.approx(0.10)
        assert data["compound_annual_growth_rate"] == pytest.approx(0.10)
        assert data["normalization"]["2022"]["dropped_non_positive"] == 1

    def test_default_years_from_config(self, client):
        response = client.post("/api/land-registry", json={"postcode": "S10", "property_type": "D"})
        assert response.status_code == 200

    def test_unknown_type_is_400(self, client):
        response = client.post("/api/land-registry", json={"postcode": "S10", "property_type": "castle"})
        assert response.status_code == 400

    def test_blank_postcode_is_400(self, client):
        response = client.post("/api/land-registry", json={"postcode": "  ", "property_type": "S"})
        assert response.status_code == 400

    def test_negative_window_is_400(self, client):
        response = client.post(
            "/api/land-registry",
            json={"postcode": "S10", "property_type": "S", "window_months": -3},
        )
        assert response.status_code == 400

    def test_zero_window_accepted(self, client):
        response = client.post(
            "/api/land-registry",
            json={"postcode": "S10", "property_type": "S", "window_months": 0, "years": [2023]},
        )
        assert response.status_code == 200

    def test_normalization_limited_to_requested_years(self, client):
        client.post("/api/land-registry", json={"postcode": "S10", "property_type": "S", "years": [2022]})
        response = client.post(
            "/api/land-registry",
            json={"postcode": "S10", "property_type": "S", "years": [2023]},
        )
        assert list(response.json()["data"]["normalization"]) == ["2023"]

    def test_clear_cache(self, client):
        client.post("/api/land-registry", json={"postcode": "S10", "property_type": "S", "years": [2022]})
        data = client.post("/api/clear-cache").json()
        assert data["success"] is True
        assert data["entries_removed"] >= 1


# =============================================================================
# Test: Analyze Property
# =============================================================================

class TestAnalyzeProperty:

    def test_analyze_listing(self, client):
        response = client.post(
            "/api/analyze-property",
            json={
                "postcode": "S10 5PR",
                "property_type": "semi-detached",
                "ask_price": 350000,
                "living_area": 108,
                "street": "Crimicar Avenue",
                "comparables": {"listed": [3900], "sold_30d": [3775]},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "market" in data
        assert data["metrics"]["s1"] is not None

    def test_unknown_type_is_400(self, client):
        response = client.post(
            "/api/analyze-property",
            json={"postcode": "S10", "property_type": "castle", "ask_price": 1, "living_area": 1},
        )
        assert response.status_code == 400

    def test_invalid_price_is_400(self, client):
        response = client.post(
            "/api/analyze-property",
            json={"postcode": "S10", "property_type": "S", "ask_price": -1, "living_area": 1},
        )
        assert response.status_code == 400
