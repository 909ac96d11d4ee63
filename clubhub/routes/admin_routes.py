from flask import Blueprint, Response, jsonify, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from clubhub.exceptions import ClubHubError
from clubhub.services.checkin_service import CheckinService
from clubhub.services.report_service import ReportService

admin_bp = Blueprint("admin", __name__)


def _csv_response(export):
    return Response(
        export["content"],
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export["file_name"]}"'},
    )


@admin_bp.route("/admin/dashboard", methods=["GET"])
@jwt_required()
def get_dashboard_overview():
    try:
        return jsonify(ReportService.get_admin_dashboard_overview(get_jwt_identity()))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error loading admin dashboard: {str(e)}")
        return jsonify({"error": "Failed to load dashboard"}), 500


@admin_bp.route("/admin/events/<int:event_id>/registrations", methods=["GET"])
@jwt_required()
def get_event_registrations(event_id):
    try:
        return jsonify(ReportService.get_admin_event_registrations(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error fetching registrations for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to fetch event registrations"}), 500


@admin_bp.route("/admin/events/<int:event_id>/checkin", methods=["GET"])
@jwt_required()
def get_checkin_dashboard(event_id):
    """Registrations of an event with check-in counts and missing required answers"""
    try:
        return jsonify(CheckinService.get_event_checkin_dashboard(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error loading check-in dashboard for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to load check-in dashboard"}), 500


@admin_bp.route("/admin/events/<int:event_id>/registrations/<int:registration_id>/checkin", methods=["POST"])
@jwt_required()
def mark_checked_in(event_id, registration_id):
    try:
        registration = CheckinService.mark_registration_checked_in(
            get_jwt_identity(), event_id, registration_id
        )
        return jsonify(registration.to_dict())
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error checking in registration {registration_id}: {str(e)}")
        return jsonify({"error": "Failed to check in registration"}), 500


@admin_bp.route("/admin/events/<int:event_id>/reports/operational", methods=["GET"])
@jwt_required()
def get_operational_reports(event_id):
    try:
        kind = request.args.get("format")
        if kind:
            return _csv_response(ReportService.get_operational_csv(get_jwt_identity(), event_id, kind))
        return jsonify(ReportService.get_operational_reports(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error building operational reports for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to build operational reports"}), 500


@admin_bp.route("/admin/events/<int:event_id>/reports/medical", methods=["GET"])
@jwt_required()
def get_medical_manifest(event_id):
    try:
        return jsonify(ReportService.get_medical_manifest(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error building medical manifest for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to build medical manifest"}), 500


@admin_bp.route("/admin/events/<int:event_id>/attendees.csv", methods=["GET"])
@jwt_required()
def export_master_attendees(event_id):
    try:
        return _csv_response(ReportService.get_master_attendees_csv(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error exporting attendees for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to export attendees"}), 500
