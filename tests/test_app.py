"""Tests for the Flask JSON API."""

import pytest

from land_deal.data_models import LandIdentity
from land_deal.serializers import plot_deal_to_dict

PLOTTING = {
    "landRate": "1200",
    "devRate": "300",
    "developmentExpenses": [{"id": "d1", "description": "Roads", "amount": "250000"}],
    "plotSales": [
        {"id": "p1", "plotNumber": 1, "areaVaar": "10", "customerName": "Ramesh Patel", "customLandRate": "100"},
        {"id": "p2", "plotNumber": 2, "areaVaar": "30", "customerName": "Sita Shah", "customLandRate": "200"},
    ],
    "totalPlots": 40,
}


@pytest.fixture
def project_id(client, deal_payload):
    response = client.post("/api/projects", json=deal_payload)
    assert response.status_code == 201
    return response.get_json()["id"]


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_config_has_no_template_settings(client):
    assert "ASSET_VERSION" not in client.application.config


class TestDeal:
    def test_compute(self, client, deal_payload):
        response = client.post("/api/deal/compute", json=deal_payload)
        assert response.status_code == 200
        body = response.get_json()
        assert body["summary"]["landed_cost"] == 50690000.0
        assert len(body["schedule"]) == 7
        assert body["schedule"][0] == {
            "id": 1,
            "date": "2024-01-01",
            "description": "Token / Down Payment",
            "amount": 5000000.0,
            "type": "Token",
        }

    def test_blank_form(self, client):
        response = client.post("/api/deal/compute", json={"financials": {"purchaseDate": "2024-01-01"}})
        assert response.status_code == 200
        assert response.get_json()["schedule"] == []

    def test_non_json_body(self, client):
        response = client.post("/api/deal/compute", data="not json", content_type="text/plain")
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_report(self, client, deal_payload):
        response = client.post("/api/deal/report", json=deal_payload)
        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert response.data.startswith(b"%PDF")
        assert "GDK_NEXUS_Sanand_FP45.pdf" in response.headers["Content-Disposition"]


class TestProjects:
    def test_save_requires_village(self, client, deal_payload):
        deal_payload["identity"]["village"] = ""
        response = client.post("/api/projects", json=deal_payload)
        assert response.status_code == 400

    def test_list_load_delete(self, client, project_id):
        listed = client.get("/api/projects").get_json()
        assert [p["id"] for p in listed] == [project_id]
        assert listed[0]["project_name"] == "Sanand - TP 12 - FP 45"
        assert listed[0]["total_land_cost"] == 50690000.0
        assert listed[0]["has_plotting"] is False
        assert client.get("/api/projects?q=bopal").get_json() == []

        loaded = client.get(f"/api/projects/{project_id}").get_json()
        assert loaded["full_data"]["identity"]["village"] == "Sanand"
        assert loaded["result"]["summary"]["grand_total_payment"] == 50000000.0

        assert client.delete(f"/api/projects/{project_id}").get_json() == {"deleted": project_id}
        assert client.get(f"/api/projects/{project_id}").status_code == 404

    def test_final_plot_basis_is_saved_as_land_cost(self, client, deal_payload):
        deal_payload["costSheetBasis"] = "60"
        project_id = client.post("/api/projects", json=deal_payload).get_json()["id"]
        listed = client.get("/api/projects").get_json()
        assert listed[0]["id"] == project_id
        assert listed[0]["total_land_cost"] == 50494000.0

    def test_missing_project(self, client):
        assert client.get("/api/projects/999").status_code == 404
        assert client.delete("/api/projects/999").status_code == 404

    def test_corrupted_project_data(self, client, store):
        project_id = store.insert_project(LandIdentity(village="Sanand"), 0.0, {})
        response = client.get(f"/api/projects/{project_id}")
        assert response.status_code == 409


class TestPlotting:
    def test_save_refreshes_average_rate(self, client, project_id):
        response = client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING)
        assert response.status_code == 200
        assert response.get_json()["currentAverageRate"] == 175.0

        body = client.get(f"/api/projects/{project_id}/plotting").get_json()
        assert body["currentAverageRate"] == 175.0
        assert body["totalDevelopmentExpense"] == 250000.0
        assert client.get("/api/projects").get_json()[0]["has_plotting"] is True

    def test_save_sets_development_cost_and_land_cost(self, client, store, project_id):
        body = client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING).get_json()
        assert body["totalLandCost"] == 50940000.0
        assert body["deductionPercent"] == 40.0
        assert body["feasibility"]["netSaleableSqMt"] == 6000.0
        assert body["feasibility"]["landedCostWithoutDev"] == 50690000.0
        assert body["feasibility"]["totalProjectCost"] == 50940000.0

        assert store.load_full_data(project_id)["overheads"]["developmentCost"] == 250000.0
        assert client.get("/api/projects").get_json()[0]["total_land_cost"] == 50940000.0

        again = client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING).get_json()
        assert again["totalLandCost"] == 50940000.0
        assert again["feasibility"]["landedCostWithoutDev"] == 50690000.0

    def test_feasibility_with_sales_rate(self, client, project_id):
        plotting = dict(PLOTTING, deductionPercent="50", expectedSalesRate="12000", salesRateUnit="SqMeter")
        client.put(f"/api/projects/{project_id}/plotting", json=plotting)
        feasibility = client.get(f"/api/projects/{project_id}/plotting").get_json()["feasibility"]
        assert feasibility["netSaleableSqMt"] == 5000.0
        assert feasibility["finishedCostPerSqMt"] == 10188.0
        assert round(feasibility["projectedRevenue"], 2) == 60000000.0
        assert round(feasibility["netProfit"], 2) == 9060000.0

    def test_unknown_sales_unit(self, client, project_id):
        plotting = dict(PLOTTING, salesRateUnit="Acre")
        response = client.put(f"/api/projects/{project_id}/plotting", json=plotting)
        assert response.status_code == 400
        assert client.get("/api/projects").get_json()[0]["has_plotting"] is False

    def test_plot_registry(self, client, project_id):
        client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING)
        rows = client.get(f"/api/projects/{project_id}/plots").get_json()
        assert [r["plotNumber"] for r in rows] == [1, 2]
        assert rows[0]["netTotal"] == 4000.0
        assert rows[0]["status"] == "No Deal"
        filtered = client.get(f"/api/projects/{project_id}/plots?q=sita").get_json()
        assert [r["id"] for r in filtered] == ["p2"]

    def test_save_plot_deal_and_report(self, client, project_id, plot_deal):
        client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING)
        response = client.put(f"/api/projects/{project_id}/plots/p1/deal", json=plot_deal_to_dict(plot_deal))
        assert response.status_code == 200
        assert response.get_json()["status"] == "Deal Active"

        rows = client.get(f"/api/projects/{project_id}/plots").get_json()
        assert rows[0]["status"] == "Deal Active"
        assert rows[0]["outstanding"] == 1000000.0

        report = client.get(f"/api/projects/{project_id}/plots/p1/report")
        assert report.status_code == 200
        assert report.data.startswith(b"%PDF")
        assert "Deal_1_Ramesh_Patel.pdf" in report.headers["Content-Disposition"]

    def test_report_without_deal(self, client, project_id):
        client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING)
        assert client.get(f"/api/projects/{project_id}/plots/p2/report").status_code == 400

    def test_unknown_plot(self, client, project_id, plot_deal):
        client.put(f"/api/projects/{project_id}/plotting", json=PLOTTING)
        response = client.put(f"/api/projects/{project_id}/plots/nope/deal", json=plot_deal_to_dict(plot_deal))
        assert response.status_code == 404


class TestTimeline:
    def test_build(self, client):
        deal = {
            "startDate": "2024-01-15",
            "dpAmount": "10",
            "dpType": "percent",
            "dpDuration": {"value": "1", "unit": "Months"},
            "totalDuration": {"value": "13", "unit": "Months"},
            "numInstallments": "3",
        }
        body = client.post("/api/timeline/build", json={"deal": deal, "netTotal": "10,00,000"}).get_json()
        assert [r["expectedAmount"] for r in body["deal"]["schedule"]] == [100000.0, 300000.0, 300000.0, 300000.0]
        assert body["status"] == "Deal Active"
        assert body["totalExpected"] == 1000000.0

    def test_confirm_partial_then_undo(self, client, plot_deal):
        body = client.post(
            "/api/timeline/confirm",
            json={"deal": plot_deal_to_dict(plot_deal), "index": 0, "payment": {"paidAmount": "60000"}},
        ).get_json()
        schedule = body["deal"]["schedule"]
        assert schedule[1]["label"] == "Down Payment (Balance)"
        assert schedule[1]["dueDate"] == "2025-02-15"
        assert body["totalReceived"] == 60000.0
        assert body["outstanding"] == 940000.0

        undone = client.post("/api/timeline/undo", json={"deal": body["deal"], "index": 0}).get_json()
        assert undone["deal"]["schedule"][0]["isPaid"] is False
        assert len(undone["deal"]["schedule"]) == 5

    def test_confirm_twice_is_rejected(self, client, plot_deal):
        first = client.post("/api/timeline/confirm", json={"deal": plot_deal_to_dict(plot_deal), "index": 0}).get_json()
        response = client.post("/api/timeline/confirm", json={"deal": first["deal"], "index": 0})
        assert response.status_code == 400

    def test_index_is_required(self, client, plot_deal):
        response = client.post("/api/timeline/undo", json={"deal": plot_deal_to_dict(plot_deal)})
        assert response.status_code == 400

    def test_index_must_be_an_integer(self, client, plot_deal):
        response = client.post("/api/timeline/confirm", json={"deal": plot_deal_to_dict(plot_deal), "index": "abc"})
        assert response.status_code == 400
        assert "abc" in response.get_json()["error"]

    def test_down_payment_above_net_total(self, client):
        deal = {"startDate": "2024-01-15", "dpAmount": "1200", "dpType": "value", "numInstallments": "2"}
        response = client.post("/api/timeline/build", json={"deal": deal, "netTotal": "1000"})
        assert response.status_code == 400

    def test_edit(self, client, plot_deal):
        deal = plot_deal_to_dict(plot_deal)
        body = client.post(
            "/api/timeline/edit",
            json={"deal": deal, "index": 3, "expectedAmount": "250000", "remarks": "revised", "dueDate": "2024-03-01"},
        ).get_json()
        schedule = body["deal"]["schedule"]
        assert schedule[1]["label"] == "Installment 3"
        assert schedule[1]["expectedAmount"] == 250000.0
        assert schedule[1]["remarks"] == "revised"

        deleted = client.post("/api/timeline/edit", json={"deal": deal, "index": 1, "delete": True}).get_json()
        assert len(deleted["deal"]["schedule"]) == 3
