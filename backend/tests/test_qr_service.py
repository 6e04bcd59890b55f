"""Test QR payload verification."""
import json
from types import SimpleNamespace
from loggedin.services.qr_service import QRService
from loggedin.services.verification_types import Verified

EVENTS = [
    SimpleNamespace(id='E1', qr_code_secret='S1'),
    SimpleNamespace(id='E2', qr_code_secret='other'),
]

def test_matching_secret_is_verified():
    outcome = QRService.verify_qr_code(json.dumps({'eventId': 'E1', 'secret': 'S1'}), EVENTS)

    assert isinstance(outcome, Verified)
    assert outcome.event_id == 'E1'

def test_secret_mismatch():
    events = [SimpleNamespace(id='E1', qr_code_secret='S2')]
    outcome = QRService.verify_qr_code(json.dumps({'eventId': 'E1', 'secret': 'S1'}), events)

    assert not outcome.verified
    assert 'secret' in outcome.reason

def test_secret_comparison_is_exact():
    outcome = QRService.verify_qr_code(json.dumps({'eventId': 'E1', 'secret': 's1 '}), EVENTS)
    assert not outcome.verified

def test_missing_secret_field():
    outcome = QRService.verify_qr_code(json.dumps({'eventId': 'E1'}), EVENTS)
    assert not outcome.verified
    assert outcome.reason == "Invalid QR code"

def test_unknown_event():
    outcome = QRService.verify_qr_code(json.dumps({'eventId': 'E9', 'secret': 'S1'}), EVENTS)
    assert not outcome.verified
    assert outcome.reason == "Event not found"

def test_unparseable_payloads_do_not_raise():
    for payload in ['not json', '{"eventId": ', '', None]:
        outcome = QRService.verify_qr_code(payload, EVENTS)
        assert not outcome.verified
        assert outcome.reason == "Invalid QR code format"

def test_non_object_payload():
    outcome = QRService.verify_qr_code('[1, 2]', EVENTS)
    assert not outcome.verified
    assert outcome.reason == "Invalid QR code"

def test_build_payload_round_trips_through_verifier():
    event = EVENTS[1]
    outcome = QRService.verify_qr_code(QRService.build_payload(event), EVENTS)
    assert outcome.verified
    assert outcome.event_id == 'E2'

def test_deeply_nested_payload_is_rejected():
    for payload in ['[' * 100000, '{"a":' * 100000]:
        outcome = QRService.verify_qr_code(payload, EVENTS)
        assert not outcome.verified
        assert outcome.reason == "Invalid QR code format"

def test_undecodable_bytes_payload():
    outcome = QRService.verify_qr_code(b'\xff\xfe\xfa', EVENTS)
    assert not outcome.verified
    assert outcome.reason == "Invalid QR code format"
