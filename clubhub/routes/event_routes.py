from flask import Blueprint, jsonify, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from clubhub.exceptions import ClubHubError
from clubhub.services.event_service import EventService
from clubhub.services.catalog_service import CatalogService

event_bp = Blueprint("event", __name__)


@event_bp.route("/events", methods=["GET"])
@jwt_required()
def get_all_events():
    events = EventService.get_events()
    return jsonify([event.to_dict() for event in events])


@event_bp.route("/events/<int:event_id>", methods=["GET"])
@jwt_required()
def get_event(event_id):
    try:
        event = EventService.get_event(event_id)
        return jsonify(event.to_dict(include_fields=True))
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error fetching event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to fetch event"}), 500


@event_bp.route("/admin/events", methods=["POST"])
@jwt_required()
def create_event():
    """Create an event with its dynamic registration fields (super admin only)"""
    try:
        event = EventService.create_event_with_fields(request.get_json() or {}, get_jwt_identity())
        return jsonify(event.to_dict(include_fields=True)), 201
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error creating event: {str(e)}")
        return jsonify({"error": "Failed to create event"}), 500


@event_bp.route("/admin/events/<int:event_id>/offerings", methods=["POST"])
@jwt_required()
def create_offering(event_id):
    try:
        offering = EventService.create_class_offering(event_id, request.get_json() or {}, get_jwt_identity())
        return jsonify(offering.to_dict()), 201
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error creating class offering for event {event_id}: {str(e)}")
        return jsonify({"error": "Failed to create class offering"}), 500


@event_bp.route("/admin/catalog", methods=["GET"])
@jwt_required()
def get_catalog():
    try:
        catalog = CatalogService.get_catalog(get_jwt_identity())
        return jsonify([item.to_dict() for item in catalog])
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error fetching class catalog: {str(e)}")
        return jsonify({"error": "Failed to fetch class catalog"}), 500


@event_bp.route("/admin/catalog", methods=["POST"])
@jwt_required()
def create_catalog_item():
    try:
        item = CatalogService.create_catalog_item(request.get_json() or {}, get_jwt_identity())
        return jsonify(item.to_dict()), 201
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error creating catalog item: {str(e)}")
        return jsonify({"error": "Failed to create catalog item"}), 500


@event_bp.route("/admin/catalog/<int:class_catalog_id>", methods=["PUT"])
@jwt_required()
def update_catalog_item(class_catalog_id):
    try:
        item = CatalogService.update_catalog_item(
            class_catalog_id, request.get_json() or {}, get_jwt_identity()
        )
        return jsonify(item.to_dict())
    except ClubHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error updating catalog item {class_catalog_id}: {str(e)}")
        return jsonify({"error": "Failed to update catalog item"}), 500
