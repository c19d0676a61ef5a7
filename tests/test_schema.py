"""Tests for request and notification schema."""

import json
from datetime import datetime

import pytest
from pydantic import ValidationError


class TestRequest:
    """Tests for the Request model."""

    def test_english_field_names(self):
        """Test creating a request with canonical field names."""
        from labnotify.schema import Request

        request = Request(id=1, title="Physics lab", status="pending")

        assert request.id == 1
        assert request.title == "Physics lab"
        assert request.status == "pending"

    def test_api_field_aliases(self):
        """Test parsing the reservation API's field names."""
        from labnotify.schema import Request

        request = Request.model_validate(
            {
                "id_solicitud": 7,
                "practica_titulo": "Organic chemistry",
                "estado": "Aprobada",
                "fecha": "2026-10-01",
            }
        )

        assert request.id == 7
        assert request.title == "Organic chemistry"
        assert request.status == "Aprobada"

    def test_extra_fields_kept(self):
        """Test that unknown API fields are preserved."""
        from labnotify.schema import Request

        request = Request.model_validate({"id": "a1", "status": "pending", "lab": "B-12"})

        assert request.id == "a1"
        assert request.model_extra == {"lab": "B-12"}

    def test_missing_status_rejected(self):
        """Test that a record without status is invalid."""
        from labnotify.schema import Request

        with pytest.raises(ValidationError):
            Request.model_validate({"id": 1})


class TestRequestStatus:
    """Tests for status parsing and comparison."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("pending", "pending"),
            ("Pendiente", "pending"),
            ("APPROVED", "approved"),
            ("aprobada", "approved"),
            (" Rechazada ", "rejected"),
            ("rejected", "rejected"),
        ],
    )
    def test_parse_known(self, raw, expected):
        """Test that English and Spanish spellings are recognized."""
        from labnotify.schema import RequestStatus

        assert RequestStatus.parse(raw) == RequestStatus(expected)

    def test_parse_unknown(self):
        """Test that unknown statuses have no meaning."""
        from labnotify.schema import RequestStatus

        assert RequestStatus.parse("cancelada") is None
        assert RequestStatus.parse("") is None
        assert RequestStatus.parse(None) is None

    def test_statuses_equal_ignores_case(self):
        """Test case-insensitive comparison."""
        from labnotify.schema import statuses_equal

        assert statuses_equal("Pendiente", "pendiente")
        assert statuses_equal("APROBADA", "aprobada ")
        assert not statuses_equal("pendiente", "aprobada")

    def test_known_status_property(self):
        """Test the request's parsed status."""
        from labnotify.schema import Request, RequestStatus

        assert Request(id=1, status="Rechazada").known_status == RequestStatus.REJECTED
        assert Request(id=1, status="en espera").known_status is None


class TestNotificationRecord:
    """Tests for NotificationRecord."""

    def test_record_is_frozen(self):
        """Test that records cannot be mutated in place."""
        from labnotify.schema import NotificationRecord

        record = NotificationRecord(id="1", request_id=1, message="hello")

        with pytest.raises(ValidationError):
            record.read = True

    def test_read_flag_copy(self):
        """Test that the read flag changes through a copy."""
        from labnotify.schema import NotificationRecord

        record = NotificationRecord(id="1", request_id=1, message="hello")
        read = record.model_copy(update={"read": True})

        assert read.read is True
        assert record.read is False
        assert read.id == record.id

    def test_json_serialization(self):
        """Test that records serialize to plain JSON and back."""
        from labnotify.schema import NotificationKind, NotificationRecord

        record = NotificationRecord(
            id="1700000000000-0",
            request_id=5,
            title="Physics lab",
            message="approved",
            kind=NotificationKind.SUCCESS,
            created_at=datetime(2026, 10, 19, 9, 30),
            previous_status="pendiente",
        )

        data = json.loads(json.dumps(record.model_dump(mode="json")))
        assert data["kind"] == "success"
        assert data["created_at"] == "2026-10-19T09:30:00"

        restored = NotificationRecord.model_validate(data)
        assert restored == record

    def test_transition_event_frozen(self):
        """Test that transition events are immutable values."""
        from labnotify.schema import TransitionEvent

        a = TransitionEvent(request_id=1, previous_status="pendiente", new_status="aprobada")
        b = TransitionEvent(request_id=1, previous_status="pendiente", new_status="aprobada")

        assert a == b
        with pytest.raises(ValidationError):
            a.new_status = "rechazada"
