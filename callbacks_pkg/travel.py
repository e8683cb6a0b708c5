from __future__ import annotations
import logging
from dash import Output, Input, State, ALL
try:
    from dash import ctx
except ImportError:
    from dash import callback_context as ctx
from dash.exceptions import PreventUpdate

from app_instance import app
from common import chevron
from crud import ModuleState, ResourceController, load_travel_notifications
from dashboard_core import travel_overview
from documents import DocumentManager, UploadFile
from module_schemas import ITINERARY
from pages.travel_page import (overview_cards, trip_list, rollup_table, cost_by_country_figure,
                               travel_doc_list)

logger = logging.getLogger(__name__)

_trips = ResourceController(ITINERARY)
_docs = DocumentManager()


# ---------------------- overview + analytics ----------------------

@app.callback(
    Output("travel-data", "data"),
    Input("travel-mount", "n_intervals"),
    Input("travel-refresh", "n_clicks"),
    Input("itinerary-state", "data"),
    prevent_initial_call=True,
)
def _load_trips(_mount, _refresh, itinerary):
    trig = ctx.triggered_id
    if not trig:
        raise PreventUpdate
    if trig == "itinerary-state":
        # the itinerary tab already holds a fresh list
        state = ModuleState.from_store(itinerary, ITINERARY.key)
        if state.error:
            raise PreventUpdate
        return {"trips": state.records, "error": ""}
    state = _trips.load(_trips.new_state())
    return {"trips": state.records, "error": state.error}


@app.callback(
    Output("travel-overview-cards", "children"),
    Output("travel-active", "children"),
    Output("travel-upcoming", "children"),
    Output("travel-cost-country", "figure"),
    Output("travel-country-table", "children"),
    Output("travel-employee-table", "children"),
    Input("travel-data", "data"),
)
def _render_overview(data):
    ov = travel_overview((data or {}).get("trips"))
    return (
        overview_cards(ov),
        trip_list(ov["activeTrips"], "No trips in progress"),
        trip_list(ov["upcomingTrips"], "Nothing scheduled for the next 30 days"),
        cost_by_country_figure(ov["countryStats"]),
        rollup_table("travel-country-rollup", ov["countryStats"], "country"),
        rollup_table("travel-employee-rollup", ov["employeeStats"], "employee"),
    )


@app.callback(
    Output("travel-rollups-collapse", "is_open"),
    Output("travel-rollups-toggle", "children"),
    Input("travel-rollups-toggle", "n_clicks"),
    State("travel-rollups-collapse", "is_open"),
    prevent_initial_call=True,
)
def toggle_rollups(n, is_open):
    if not n:
        raise PreventUpdate
    opened = not bool(is_open)
    return opened, chevron(opened)


@app.callback(
    Output("travel-notifications", "children"),
    Output("travel-notifications-error", "children"),
    Output("travel-notifications-error", "is_open"),
    Input("travel-mount", "n_intervals"),
    Input("travel-refresh", "n_clicks"),
    prevent_initial_call=True,
)
def _load_notifications(_mount, _refresh):
    trips, err = load_travel_notifications()
    return trip_list(trips, "No upcoming trip notifications"), err, bool(err)


# ---------------------- travel documents ----------------------

@app.callback(
    Output("travel-docs-store", "data"),
    Output("travel-docs-msg", "children"),
    Output("travel-docs-msg", "className"),
    Input("itinerary-table", "selected_row_ids"),
    Input("travel-doc-add", "n_clicks"),
    Input({"type": "travel-doc-rm", "key": ALL}, "n_clicks"),
    State("travel-doc-type", "value"),
    State("travel-doc-upload", "contents"),
    State("travel-doc-upload", "filename"),
    State("travel-docs-store", "data"),
    prevent_initial_call=True,
)
def _travel_documents(selected, _add, _rm, doc_type, contents, filename, current):
    trig = ctx.triggered_id
    if trig is None:
        raise PreventUpdate
    current = current or {}
    travel_id = current.get("travelId")

    if trig == "itinerary-table":
        travel_id = (selected or [None])[0]
        if not travel_id:
            return {}, "", "small mb-2"
        docs, err = _docs.travel_documents(travel_id)
    elif trig == "travel-doc-add":
        if not travel_id:
            return current, "Select a travel record first", "small mb-2 text-danger"
        upload = UploadFile.from_data_url(filename, contents) if contents else None
        docs, err = _docs.upload_travel_document(travel_id, doc_type, upload)
        if not err:
            logger.info("[travel] %s uploaded to %s", filename, travel_id)
            return {"travelId": travel_id, "documents": docs}, "Document uploaded", "small mb-2 text-success"
        if not docs:
            docs = current.get("documents") or []
    elif isinstance(trig, dict) and trig.get("type") == "travel-doc-rm":
        if not (ctx.triggered and ctx.triggered[0].get("value")):
            raise PreventUpdate
        record = {"_id": travel_id, "documents": current.get("documents") or []}
        docs, err = _docs.remove_travel_document(record, trig["key"])
        if not err:
            return {"travelId": travel_id, "documents": docs}, "Document removed", "small mb-2 text-success"
    else:
        raise PreventUpdate

    css = "small mb-2 text-danger" if err else "small mb-2"
    return {"travelId": travel_id, "documents": docs}, err, css


@app.callback(Output("travel-docs-list", "children"), Input("travel-docs-store", "data"))
def _render_travel_documents(data):
    return travel_doc_list((data or {}).get("documents") or [])
