"""Flask JSON API for the land deal planner.

The browser front end posts raw form values; every numeric field is coerced
at this boundary (blank means zero) before reaching the calculators. Plot
timeline endpoints are stateless reducers: the client sends its current deal
and receives the new one. Nothing is written to the database until the deal
is explicitly saved.
"""

import logging
from dataclasses import replace
from io import BytesIO

from flask import Blueprint, Flask, current_app, jsonify, request, send_file

from land_deal.data_models import PaymentInput
from land_deal.engine import compute_deal
from land_deal.plotting import (
    feasibility,
    find_plot,
    plot_net_total,
    refresh_average_rate,
    replace_plot,
    search_plots,
    total_development_expense,
    with_development_cost,
)
from land_deal.reports import (
    PdfOptions,
    build_deal_report,
    build_plot_deal_report,
    deal_report_filename,
    plot_report_filename,
)
from land_deal.serializers import (
    deal_inputs_from_dict,
    feasibility_to_dict,
    payment_input_from_dict,
    plot_deal_from_dict,
    plot_deal_to_dict,
    plotting_from_dict,
    plotting_to_dict,
    result_to_dict,
    saved_state_from_dict,
    saved_state_to_dict,
)
from land_deal.timeline import (
    build_deal_timeline,
    confirm_payment,
    deal_status,
    delete_row,
    outstanding,
    total_expected,
    total_received,
    undo_payment,
    update_due_date,
    update_expected_amount,
    update_payment_details,
)
from land_deal.utils import parse_iso_date, parse_optional_number
from land_deal_web.config import Config, config as default_config
from land_deal_web.project_store import (
    MissingProjectDataError,
    ProjectStoreError,
    create_store_from_env,
)

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

DETAIL_FIELDS = {
    "paymentMode": "payment_mode",
    "bankName": "bank_name",
    "refNumber": "ref_number",
    "remarks": "remarks",
}


def _store():
    return current_app.config["PROJECT_STORE"]


def _pdf_options() -> PdfOptions:
    return PdfOptions(
        page_size=current_app.config["REPORT_PAGE_SIZE"],
        orientation=current_app.config["REPORT_ORIENTATION"],
        prefix=current_app.config["REPORT_PREFIX"],
    )


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _index(data: dict) -> int:
    raw = data.get("index")
    if raw is None:
        raise ValueError("index is required")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid row index: {raw!r}") from None



def _deal_response(deal):
    schedule = deal.schedule
    return jsonify(
        {
            "deal": plot_deal_to_dict(deal),
            "status": deal_status(schedule),
            "totalExpected": float(total_expected(schedule)),
            "totalReceived": float(total_received(schedule)),
            "outstanding": float(outstanding(schedule)),
        }
    )


def _pdf_response(content: bytes, filename: str):
    return send_file(
        BytesIO(content),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=filename,
    )


def _plotting_for(project_id: int):
    project = _store().get_project(project_id)
    return project, plotting_from_dict(project["plotting_data"])


# --- Errors ----------------------------------------------------------------


@api.errorhandler(ValueError)
def _bad_request(exc):
    logger.warning("Rejected request: %s", exc)
    return jsonify({"error": str(exc)}), 400


@api.errorhandler(LookupError)
def _not_found(exc):
    return jsonify({"error": f"Not found: {exc}"}), 404


@api.errorhandler(MissingProjectDataError)
def _missing_data(exc):
    logger.error("Project load aborted: %s", exc)
    return jsonify({"error": str(exc)}), 409


@api.errorhandler(ProjectStoreError)
def _store_failure(exc):
    return jsonify({"error": str(exc)}), 500


# --- Deal structurer -------------------------------------------------------


@api.post("/deal/compute")
def compute():
    """Run the deal scheduler on raw form input."""
    result = compute_deal(*deal_inputs_from_dict(_payload()))
    return jsonify(result_to_dict(result))


@api.post("/deal/report")
def deal_report():
    data = _payload()
    identity, measurements, financials, overheads = deal_inputs_from_dict(data)
    result = compute_deal(identity, measurements, financials, overheads)
    options = _pdf_options()
    content = build_deal_report(identity, result, options, basis=str(data.get("costSheetBasis") or "100"))
    return _pdf_response(content, deal_report_filename(identity, options.prefix))


# --- Project history -------------------------------------------------------


@api.get("/projects")
def list_projects():
    projects = _store().list_projects(request.args.get("q"))
    return jsonify(
        [
            {
                "id": p["id"],
                "project_name": p["project_name"],
                "village_name": p["village_name"],
                "created_at": p["created_at"],
                "total_land_cost": p["total_land_cost"],
                "has_plotting": p["plotting_data"] is not None,
            }
            for p in projects
        ]
    )


@api.post("/projects")
def save_project():
    """Save the current deal as a new project."""
    state = saved_state_from_dict(_payload())
    result = compute_deal(state.identity, state.measurements, state.financials, state.overheads)
    project_id = _store().insert_project(
        state.identity,
        float(result.landed_cost_for_basis(state.cost_sheet_basis)),
        saved_state_to_dict(state),
    )
    return jsonify({"id": project_id}), 201


@api.get("/projects/<int:project_id>")
def load_project(project_id: int):
    state = saved_state_from_dict(_store().load_full_data(project_id))
    result = compute_deal(state.identity, state.measurements, state.financials, state.overheads)
    return jsonify({"id": project_id, "full_data": saved_state_to_dict(state), "result": result_to_dict(result)})


@api.delete("/projects/<int:project_id>")
def delete_project(project_id: int):
    _store().delete_project(project_id)
    return jsonify({"deleted": project_id})


# --- Plotting dashboard ----------------------------------------------------


def _saved_state(project: dict):
    if not project["full_data"]:
        raise MissingProjectDataError(f"Project {project['id']} data is corrupted or missing")
    return saved_state_from_dict(project["full_data"])


def _plotting_body(state, saved) -> dict:
    body = plotting_to_dict(state)
    body["totalDevelopmentExpense"] = float(total_development_expense(state))
    body["feasibility"] = feasibility_to_dict(feasibility(state, saved))
    return body


@api.get("/projects/<int:project_id>/plotting")
def get_plotting(project_id: int):
    project, state = _plotting_for(project_id)
    return jsonify(_plotting_body(state, _saved_state(project)))


@api.put("/projects/<int:project_id>/plotting")
def save_plotting(project_id: int):
    """Replace a project's plotting data.

    The average land rate is refreshed, the deal's development cost is set to
    the total of the development expenses and the project's land cost is
    recomputed, all in one write.
    """
    state = refresh_average_rate(plotting_from_dict(_payload()))
    saved = with_development_cost(_saved_state(_store().get_project(project_id)), state)
    result = compute_deal(saved.identity, saved.measurements, saved.financials, saved.overheads)
    total_land_cost = float(result.landed_cost_for_basis(saved.cost_sheet_basis))
    body = _plotting_body(state, saved)
    _store().update_project(
        project_id,
        plotting_data=plotting_to_dict(state),
        full_data=saved_state_to_dict(saved),
        total_land_cost=total_land_cost,
    )
    body["totalLandCost"] = total_land_cost
    return jsonify(body)


# --- Plot registry ---------------------------------------------------------


@api.get("/projects/<int:project_id>/plots")
def list_plots(project_id: int):
    _, state = _plotting_for(project_id)
    rows = []
    for plot in search_plots(state.plot_sales, request.args.get("q", "")):
        schedule = plot.deal.schedule if plot.deal else []
        rows.append(
            {
                "id": plot.id,
                "plotNumber": plot.plot_number,
                "customerName": plot.customer_name,
                "phoneNumber": plot.phone_number,
                "areaVaar": float(plot.area_vaar),
                "netTotal": float(plot_net_total(plot, state)),
                "status": deal_status(schedule),
                "totalReceived": float(total_received(schedule)),
                "outstanding": float(outstanding(schedule)),
            }
        )
    return jsonify(rows)


@api.put("/projects/<int:project_id>/plots/<plot_id>/deal")
def save_plot_deal(project_id: int, plot_id: str):
    """Persist a plot's deal inside the project's plotting data."""
    deal = plot_deal_from_dict(_payload())
    _, state = _plotting_for(project_id)
    plot = find_plot(state, plot_id)
    state = replace_plot(state, replace(plot, deal=deal))
    _store().update_project(project_id, plotting_data=plotting_to_dict(state))
    return _deal_response(deal)


@api.get("/projects/<int:project_id>/plots/<plot_id>/report")
def plot_report(project_id: int, plot_id: str):
    project, state = _plotting_for(project_id)
    plot = find_plot(state, plot_id)
    if plot.deal is None or not plot.deal.schedule:
        raise ValueError(f"Plot {plot.plot_number} has no payment schedule")
    identity = saved_state_from_dict(project["full_data"] or {}).identity
    content = build_plot_deal_report(plot, plot.deal, identity, _pdf_options())
    return _pdf_response(content, plot_report_filename(plot))


# --- Timeline reducers -----------------------------------------------------


@api.post("/timeline/build")
def build():
    """Rebuild a deal's schedule. Any recorded payments are discarded."""
    data = _payload()
    deal = plot_deal_from_dict(data.get("deal") or {})
    deal = build_deal_timeline(deal, parse_optional_number(data.get("netTotal")))
    return _deal_response(deal)


@api.post("/timeline/confirm")
def confirm():
    data = _payload()
    deal = plot_deal_from_dict(data.get("deal") or {})
    payment: PaymentInput = payment_input_from_dict(data.get("payment") or {})
    schedule = confirm_payment(deal.schedule, _index(data), payment, deal.end_date)
    deal.schedule = schedule
    return _deal_response(deal)


@api.post("/timeline/undo")
def undo():
    data = _payload()
    deal = plot_deal_from_dict(data.get("deal") or {})
    deal.schedule = undo_payment(deal.schedule, _index(data))
    return _deal_response(deal)


@api.post("/timeline/edit")
def edit():
    """Apply a single-row edit: delete, amount, details or due date."""
    data = _payload()
    deal = plot_deal_from_dict(data.get("deal") or {})
    index = _index(data)
    schedule = deal.schedule
    if data.get("delete"):
        deal.schedule = delete_row(schedule, index)
        return _deal_response(deal)
    if data.get("expectedAmount") is not None:
        schedule = update_expected_amount(schedule, index, parse_optional_number(data["expectedAmount"]))
    details = {attr: data[key] for key, attr in DETAIL_FIELDS.items() if key in data}
    if details:
        schedule = update_payment_details(schedule, index, **details)
    # Re-sorting moves rows, so the date edit goes last.
    if data.get("dueDate"):
        schedule = update_due_date(schedule, index, parse_iso_date(data["dueDate"]))
    deal.schedule = schedule
    return _deal_response(deal)


def create_app(app_config: Config = None, store=None) -> Flask:
    """Build the Flask application.

    ``store`` overrides the database-backed project store (tests pass one
    bound to a temporary database).
    """
    app_config = app_config or default_config
    logging.basicConfig(
        level=app_config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app = Flask(__name__)
    app.config["SECRET_KEY"] = app_config.SECRET_KEY
    app.config["REPORT_PREFIX"] = app_config.REPORT_PREFIX
    app.config["REPORT_PAGE_SIZE"] = app_config.REPORT_PAGE_SIZE
    app.config["REPORT_ORIENTATION"] = app_config.REPORT_ORIENTATION
    app.config["PROJECT_STORE"] = store or create_store_from_env(app_config.DATABASE_URL)
    app.json.sort_keys = False  # preserve dict key order
    app.register_blueprint(api)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


if __name__ == "__main__":
    print("Starting Land Deal Planner web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
