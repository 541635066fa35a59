# aquasure/app.py

import logging

import numpy as np
import pandas as pd
from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from aquasure import config
from aquasure.cron.evaluate_alerts import run_evaluation
from aquasure.cron.import_samples import run_import
from aquasure.hmpi import aggregation, compliance, reports
from aquasure.hmpi.errors import InvalidInputError, MissingReferenceError, MissingStandardError
from aquasure.hmpi.standards import STANDARDS
from aquasure.hmpi.validation import as_real
from aquasure.supabase_db import SupabaseRepository

logger = logging.getLogger(__name__)


# --------------------------------------------------
# JSON SAFE CONVERSION
# ---------------------------------------------------
def json_safe(x):
    if isinstance(x, dict):
        return {k: json_safe(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [json_safe(v) for v in x]
    if x is None or x is pd.NA:
        return None
    if isinstance(x, (np.bool_, bool)):
        return bool(x)
    if isinstance(x, np.integer):
        return int(x)
    if isinstance(x, (np.floating, float)):
        x = float(x)
        return x if np.isfinite(x) else None
    return x


def _csv_arg(name):
    raw = request.args.get(name, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def _filter_arg(name):
    value = request.args.get(name)
    if not value or value == "all":
        return None
    return value


def create_app(repository=None):
    app = Flask(__name__)
    CORS(app)
    repo = repository or SupabaseRepository()

    def load_samples():
        return repo.list_samples(project_id=_filter_arg("project"), metal=_filter_arg("metal"))

    # ---------------------------------------------------
    # ERRORS
    # ---------------------------------------------------
    @app.errorhandler(InvalidInputError)
    def invalid_input(e):
        return jsonify({"error": str(e), "field": e.field}), 400

    @app.errorhandler(MissingReferenceError)
    @app.errorhandler(MissingStandardError)
    def missing_lookup(e):
        return jsonify({"error": str(e)}), 422

    # ---------------------------------------------------
    # ROUTES - CALCULATIONS / REPORTS
    # ---------------------------------------------------
    @app.get("/api/calculations")
    def calculations():
        rows = reports.calculation_rows(load_samples(), repo.list_projects(), STANDARDS)
        return jsonify(json_safe({"rows": rows, "stats": reports.calculation_stats(rows)}))

    @app.get("/api/calculations/export")
    def export_calculations():
        df = reports.calculation_table(load_samples(), repo.list_projects(), STANDARDS)
        return Response(
            reports.export_csv(df),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=HMPI_Calculations.csv"},
        )

    @app.get("/api/reports")
    def report():
        return jsonify(json_safe(reports.report_summary(load_samples())))

    @app.get("/api/map-points")
    def map_points():
        return jsonify(json_safe(reports.map_points(load_samples())))

    # ---------------------------------------------------
    # ROUTES - DASHBOARD / TRENDS / COMPARISON
    # ---------------------------------------------------
    @app.get("/api/dashboard")
    def dashboard():
        summary = aggregation.dashboard_summary(
            repo.list_samples(), repo.list_projects(), repo.list_alerts()
        )
        return jsonify(json_safe(summary))

    @app.get("/api/trends")
    def trends():
        samples = load_samples()
        series = aggregation.time_series(samples)
        return jsonify(json_safe({
            "time_series": [
                {"month": b.bucket, "avg_hmpi": b.average_index, "count": b.count}
                for b in series
            ],
            "districts": aggregation.district_summary(samples),
            "metals": aggregation.metal_summary(samples),
            "stats": aggregation.trend_summary(samples),
        }))

    @app.get("/api/comparison/<mode>")
    def comparison(mode):
        samples = repo.list_samples()
        ids = _csv_arg("ids")
        if mode == "projects":
            rows = aggregation.compare_projects(samples, repo.list_projects(), ids)
        elif mode == "metals":
            rows = aggregation.compare_metals(samples, STANDARDS, ids)
        elif mode == "districts":
            rows = aggregation.compare_districts(samples, ids)
        elif mode == "standards":
            rows = aggregation.compare_standards(samples, STANDARDS)
        else:
            return jsonify({"error": f"Unknown comparison mode: {mode}"}), 404
        return jsonify(json_safe(rows))

    # ---------------------------------------------------
    # ROUTES - COMPLIANCE / POLICIES
    # ---------------------------------------------------
    @app.get("/api/compliance")
    def compliance_overview():
        stats = compliance.compliance_stats(repo.list_samples(), repo.list_projects(), STANDARDS)
        return jsonify(json_safe(stats))

    @app.get("/api/policies/impact")
    def policy_impact():
        by_project = aggregation.group_by_key(repo.list_samples(), lambda s: s.project_id)
        rows = []
        for project_id, project in repo.list_projects().items():
            members = by_project.get(project_id, [])
            rows.append({
                "project_id": project_id,
                "name": project.name,
                "samples": len(members),
                **compliance.threshold_impact(members, project.policy_threshold),
            })
        return jsonify(json_safe(rows))

    @app.get("/api/policies")
    def policies():
        return jsonify(json_safe([
            {"id": p.id, "name": p.name, "metal": p.metal, "threshold": p.threshold,
             "created_by": p.created_by}
            for p in repo.list_policies()
        ]))

    @app.post("/api/policies")
    def create_policy():
        payload = request.get_json(force=True) or {}
        name = (payload.get("name") or "").strip()
        metal = (payload.get("metal") or "").strip()
        threshold = as_real("threshold", payload.get("threshold"))
        if not name or not metal:
            return jsonify({"error": "name and metal are required"}), 400
        if threshold <= 0:
            raise InvalidInputError("threshold", threshold, "threshold must be greater than zero")
        policy = repo.insert_policy(name, metal, threshold, payload.get("created_by", ""))
        return jsonify(json_safe({
            "id": policy.id, "name": policy.name, "metal": policy.metal,
            "threshold": policy.threshold,
        } if policy else {})), 201

    @app.post("/api/projects/<project_id>/threshold")
    def update_threshold(project_id):
        payload = request.get_json(force=True) or {}
        threshold = as_real("threshold", payload.get("threshold"))
        if threshold <= 0:
            raise InvalidInputError("threshold", threshold, "threshold must be greater than zero")
        project = repo.get_project(project_id)
        if project is None:
            return jsonify({"error": f"Unknown project: {project_id}"}), 404
        repo.update_project_threshold(project_id, threshold)
        return jsonify(json_safe({
            "project_id": project_id,
            "name": project.name,
            "previous_threshold": project.policy_threshold,
            "policy_threshold_hmpi": threshold,
        }))

    # ---------------------------------------------------
    # ROUTES - ALERTS
    # ---------------------------------------------------
    @app.post("/api/alerts/evaluate")
    def evaluate_alerts():
        new_alerts, rejected = run_evaluation(
            repo, caution_threshold=config.HMPI_CAUTION_THRESHOLD
        )
        logger.info("Created %d alerts", len(new_alerts))
        return jsonify(json_safe({
            "created": [a.to_record() for a in new_alerts],
            "skipped": [r.to_dict() for r in rejected],
        }))

    @app.post("/api/alerts/<alert_id>/acknowledge")
    def acknowledge(alert_id):
        updated = repo.acknowledge_alert(alert_id)
        if updated is None:
            return jsonify({"error": f"Unknown alert: {alert_id}"}), 404
        return jsonify(json_safe(updated))

    # ---------------------------------------------------
    # ROUTES - SAMPLE IMPORT
    # ---------------------------------------------------
    @app.post("/api/samples/import")
    def import_samples():
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"error": "CSV file is required"}), 400
        fill_missing = request.form.get("fill_missing", "false").lower() == "true"

        samples, rejected = run_import(upload.stream, repo, fill_missing=fill_missing)
        return jsonify(json_safe({
            "inserted": len(samples),
            "rejected": [r.to_dict() for r in rejected],
        }))

    return app


# ---------------------------------------------------
# RUN SERVER
# ---------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    logger.info("Flask server running at http://127.0.0.1:5000/")
    create_app().run(debug=True)
