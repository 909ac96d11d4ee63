from flask import Blueprint, jsonify, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from clubhub.exceptions import ClubHubError
from clubhub.services.registration_service import RegistrationService
from clubhub.services.enrollment_service import EnrollmentService
from clubhub.services.report_service import ReportService

registration_bp = Blueprint("registration", __name__)


def _payload():
    # Accept both a JSON body and the raw JSON string posted by form clients
    data = request.get_json(silent=True)
    if data is None:
        return request.get_data(as_text=True)
    if isinstance(data, dict) and "payload" in data:
        return data["payload"]
    return data


@registration_bp.route("/events/<int:event_id>/registration", methods=["GET"])
@jwt_required()
def get_registration_form(event_id):
    try:
        return jsonify(RegistrationService.get_registration_form(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error loading registration form for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to load registration form"}), 500


@registration_bp.route("/events/<int:event_id>/registration/draft", methods=["PUT"])
@jwt_required()
def save_draft(event_id):
    try:
        registration = RegistrationService.save_draft(get_jwt_identity(), event_id, _payload())
        return jsonify(registration.to_dict())
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error saving registration draft for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to save registration"}), 500


@registration_bp.route("/events/<int:event_id>/registration/submit", methods=["POST"])
@jwt_required()
def submit_registration(event_id):
    try:
        registration = RegistrationService.submit(get_jwt_identity(), event_id, _payload())
        return jsonify(registration.to_dict())
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error submitting registration for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to submit registration"}), 500


@registration_bp.route("/events/<int:event_id>/registration/export", methods=["GET"])
@jwt_required()
def export_registration(event_id):
    try:
        return jsonify(ReportService.get_club_registration_export(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error exporting registration for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to export registration"}), 500


@registration_bp.route("/events/<int:event_id>/classes", methods=["GET"])
@jwt_required()
def get_class_board(event_id):
    try:
        return jsonify(EnrollmentService.get_class_board(get_jwt_identity(), event_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error loading class board for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to load class board"}), 500


@registration_bp.route("/events/<int:event_id>/enrollments", methods=["POST"])
@jwt_required()
def enroll_attendee(event_id):
    data = request.get_json() or {}
    try:
        outcome = EnrollmentService.enroll_attendee(
            get_jwt_identity(),
            event_id,
            data.get("roster_member_id"),
            data.get("offering_id"),
        )
        return jsonify({"outcome": outcome.value}), 201 if outcome.value == "ENROLLED" else 200
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error enrolling attendee for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to enroll attendee"}), 500
