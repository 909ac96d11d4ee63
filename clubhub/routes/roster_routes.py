from flask import Blueprint, jsonify, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from clubhub.exceptions import ClubHubError
from clubhub.services.roster_service import RosterService
from clubhub.services.teacher_service import TeacherService
from clubhub.services.user_service import UserService

roster_bp = Blueprint("roster", __name__)


@roster_bp.route("/roster", methods=["GET"])
@jwt_required()
def get_roster():
    try:
        return jsonify(RosterService.get_roster(get_jwt_identity()))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error fetching roster: {str(e)}")
        return jsonify({"error": "Failed to fetch roster"}), 500


@roster_bp.route("/roster/members", methods=["POST"])
@jwt_required()
def save_roster_member():
    try:
        member = RosterService.save_roster_member(get_jwt_identity(), request.get_json() or {})
        return jsonify(member.to_dict())
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error saving roster member: {str(e)}")
        return jsonify({"error": "Failed to save roster member"}), 500


@roster_bp.route("/roster/rollover", methods=["POST"])
@jwt_required()
def rollover():
    data = request.get_json() or {}
    try:
        year = RosterService.execute_yearly_rollover(
            get_jwt_identity(),
            data.get("club_id"),
            data.get("previous_year_id"),
            data.get("year_label"),
        )
        return jsonify(year.to_dict()), 201
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error during roster rollover: {str(e)}")
        return jsonify({"error": "Failed to roll over roster"}), 500


@roster_bp.route("/teacher/offerings/<int:offering_id>", methods=["GET"])
@jwt_required()
def get_class_roster(offering_id):
    try:
        return jsonify(TeacherService.get_class_roster(get_jwt_identity(), offering_id))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error fetching class roster for offering {offering_id}: {str(e)}")
        return jsonify({"error": "Failed to fetch class roster"}), 500


@roster_bp.route("/teacher/offerings/<int:offering_id>/attendance", methods=["PUT"])
@jwt_required()
def update_attendance(offering_id):
    data = request.get_json() or {}
    try:
        TeacherService.update_class_attendance(
            get_jwt_identity(), offering_id, data.get("roster_member_id"), bool(data.get("attended"))
        )
        return jsonify({"message": "Attendance updated"})
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error updating attendance for offering {offering_id}: {str(e)}")
        return jsonify({"error": "Failed to update attendance"}), 500


@roster_bp.route("/teacher/offerings/<int:offering_id>/signoff", methods=["POST"])
@jwt_required()
def sign_off(offering_id):
    data = request.get_json() or {}
    try:
        created = TeacherService.sign_off_requirements(
            get_jwt_identity(), offering_id, data.get("roster_member_ids"), data.get("notes")
        )
        return jsonify({"created": created})
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error signing off requirements for offering {offering_id}: {str(e)}")
        return jsonify({"error": "Failed to sign off requirements"}), 500


@roster_bp.route("/student/portal", methods=["GET"])
@jwt_required()
def get_student_portal():
    try:
        return jsonify(UserService.get_student_portal(get_jwt_identity()))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error loading student portal: {str(e)}")
        return jsonify({"error": "Failed to load student portal"}), 500
