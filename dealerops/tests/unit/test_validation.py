import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from dealerops.core.enums import (
    LeadStatus,
    SaleStatus,
    VehicleStatus,
    is_valid_lead_status,
    is_valid_sale_status,
    is_valid_vehicle_status,
    parse_lead_status,
    parse_role,
    parse_sale_status,
    parse_vehicle_status,
)
from dealerops.core.exceptions import ValidationError
from dealerops.core.validation import (
    is_valid_vin,
    require_non_negative_amount,
    require_positive_amount,
    to_decimal,
    validate_email,
    validate_future_date,
    validate_phone,
    validate_password,
    validate_vin,
)

pytestmark = pytest.mark.unit


class TestVin:

    def test_valid_vin(self):
        assert is_valid_vin("1HGCM82633A004352")

    def test_lowercase_is_normalised(self):
        assert validate_vin("1hgcm82633a004352") == "1HGCM82633A004352"

    @pytest.mark.parametrize("vin", ["1HGCM82633A00435", "1HGCM82633A0043521", "", None])
    def test_wrong_length(self, vin):
        with pytest.raises(ValidationError) as exc:
            validate_vin(vin)
        assert "17 characters" in exc.value.message

    @pytest.mark.parametrize("letter", ["I", "O", "Q"])
    def test_excluded_letters(self, letter):
        vin = "1HGCM82633A00435" + letter
        assert len(vin) == 17
        with pytest.raises(ValidationError) as exc:
            validate_vin(vin)
        assert "invalid characters" in exc.value.message

    def test_punctuation_rejected(self):
        assert not is_valid_vin("1HGCM82633A-04352")


class TestStatusVocabulary:

    def test_lead_statuses(self):
        for value in ("new", "contacted", "qualified", "negotiating", "won", "lost"):
            assert is_valid_lead_status(value)
        assert not is_valid_lead_status("archived")

    def test_sale_statuses(self):
        for value in ("pending", "financing", "approved", "delivered", "completed"):
            assert is_valid_sale_status(value)
        assert not is_valid_sale_status("cancelled")

    def test_vehicle_statuses(self):
        for value in ("available", "reserved", "sold"):
            assert is_valid_vehicle_status(value)
        assert not is_valid_vehicle_status("in_service")

    def test_case_insensitive(self):
        assert parse_lead_status("WON") == LeadStatus.WON
        assert parse_sale_status(" Pending ") == SaleStatus.PENDING
        assert parse_vehicle_status("Reserved") == VehicleStatus.RESERVED

    def test_non_string_values(self):
        assert parse_sale_status(None) is None
        assert parse_sale_status(3) is None
        assert parse_vehicle_status(VehicleStatus.SOLD) == VehicleStatus.SOLD

    def test_stored_form_is_lowercase(self):
        assert str(SaleStatus.COMPLETED) == "completed"
        assert LeadStatus.NEGOTIATING.value == "negotiating"

    def test_roles(self):
        assert parse_role("Finance") is not None
        assert parse_role("owner") is None


class TestFieldValidators:

    def test_email(self):
        assert validate_email("jane@example.com")
        assert not validate_email("jane@example")
        assert not validate_email("not an email")
        assert not validate_email(None)

    def test_phone(self):
        assert validate_phone("+1 (555) 010-0199")
        assert not validate_phone("call me")

    def test_password(self):
        validate_password("secret")
        with pytest.raises(ValidationError):
            validate_password("12345")

    def test_to_decimal(self):
        assert to_decimal("19.99") == Decimal("19.99")
        assert to_decimal(5) == Decimal("5")
        assert to_decimal("NaN") is None
        assert to_decimal(False) is None
        assert to_decimal("twelve") is None

    def test_positive_amount(self):
        assert require_positive_amount("25000", "sale_price") == Decimal("25000")
        with pytest.raises(ValidationError) as exc:
            require_positive_amount(0, "sale_price")
        assert exc.value.message == "sale_price must be a positive number"

    def test_non_negative_amount(self):
        assert require_non_negative_amount(0, "trade_in_value") == Decimal("0")
        with pytest.raises(ValidationError):
            require_non_negative_amount(-1, "trade_in_value")

    def test_future_date(self):
        now = datetime.now(timezone.utc)
        assert validate_future_date(now)
        assert validate_future_date((now + timedelta(days=3)).isoformat())
        assert not validate_future_date(now - timedelta(days=2))
        assert not validate_future_date("next tuesday")
