"""Event API: student listing and admin management."""
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loggedin.services.event_service import EventService, EventError
from loggedin.services.qr_service import QRService
from loggedin.services.record_store import RecordStoreError
from loggedin.utils.decorators import admin_required
from loggedin.utils.helpers import success_response, error_response

events_bp = Blueprint('events', __name__)

@events_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Events service is running')

@events_bp.route('/', methods=['GET'])
@jwt_required()
def list_upcoming_events():
    """Events students can still check in to."""
    try:
        events = EventService.list_upcoming()
    except RecordStoreError:
        return error_response("Could not load available events. Please try again.", 500)

    return success_response(data={'events': [event.to_dict() for event in events]})

@events_bp.route('/<event_id>', methods=['GET'])
@jwt_required()
def get_event(event_id):
    try:
        event = EventService.get_event(event_id)
    except EventError as e:
        return error_response(e.message, e.status_code)

    return success_response(data=event.to_dict())

@events_bp.route('/manage', methods=['GET'])
@jwt_required()
@admin_required
def list_all_events():
    """All events including past ones, with their QR secrets."""
    try:
        events = EventService.list_all()
    except RecordStoreError:
        return error_response("Failed to load events", 500)

    return success_response(data={'events': [event.to_dict(exclude=[]) for event in events]})

@events_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_event():
    try:
        event = EventService.create_event(request.get_json(silent=True))
    except EventError as e:
        return error_response(e.message, e.status_code)

    return success_response(data=event.to_dict(exclude=[]), message="Event created", status_code=201)

@events_bp.route('/<event_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_event(event_id):
    try:
        event = EventService.update_event(event_id, request.get_json(silent=True))
    except EventError as e:
        return error_response(e.message, e.status_code)

    return success_response(data=event.to_dict(exclude=[]), message="Event updated")

@events_bp.route('/<event_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_event(event_id):
    try:
        EventService.delete_event(event_id)
    except EventError as e:
        return error_response(e.message, e.status_code)

    return success_response(message="Event deleted")

@events_bp.route('/<event_id>/qr', methods=['GET'])
@jwt_required()
@admin_required
def get_event_qr_payload(event_id):
    """Payload the admin UI renders as the event's QR code."""
    try:
        event = EventService.get_event(event_id)
    except EventError as e:
        return error_response(e.message, e.status_code)

    return success_response(data={
        'event_id': event.id,
        'title': event.title,
        'qr_data': QRService.build_payload(event)
    })
