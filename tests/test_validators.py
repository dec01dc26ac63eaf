"""
Tests for checkout email and phone validation.
"""
import pytest
from pydantic import ValidationError

from kitchen_shop.schemas.orders import CustomerDetails
from kitchen_shop.validators import validate_email_address, validate_phone_number

from conftest import make_customer


class TestEmailValidation:

    def test_valid_email_is_normalized(self):
        email, error = validate_email_address("  Chef@BakersKitchen.co.uk ")
        assert error is None
        assert email == "Chef@bakerskitchen.co.uk"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required(self, value):
        assert validate_email_address(value) == (None, "Email address is required")

    def test_missing_at_sign(self):
        assert validate_email_address("chef.bakerskitchen.co.uk") == (
            None,
            "Email address must contain an @ sign",
        )

    def test_bad_domain(self):
        email, error = validate_email_address("chef@bakerskitchen")
        assert email is None
        assert error is not None


class TestPhoneValidation:

    def test_uk_mobile_in_e164(self):
        assert validate_phone_number("07400 123456") == ("+447400123456", None)

    def test_uk_alias_region(self):
        assert validate_phone_number("07400 123456", "UK") == ("+447400123456", None)

    def test_international_format_ignores_region(self):
        phone, error = validate_phone_number("+33 6 12 34 56 78", "GB")
        assert error is None
        assert phone == "+33612345678"

    def test_national_number_parsed_in_billing_region(self):
        phone, error = validate_phone_number("06 12 34 56 78", "FR")
        assert error is None
        assert phone == "+33612345678"

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_required(self, value):
        assert validate_phone_number(value) == (None, "Phone number is required")

    def test_unparseable(self):
        assert validate_phone_number("call me") == (None, "Phone number could not be understood")

    def test_invalid_number(self):
        assert validate_phone_number("07400 12") == (None, "Please enter a valid phone number")


class TestCustomerDetails:

    def test_valid_customer(self):
        customer = CustomerDetails(**make_customer(country="gb", vat_number="  "))
        assert customer.country == "GB"
        assert customer.phone == "+447400123456"
        assert customer.vat_number is None
        assert customer.full_name == "Sam Baker"

    def test_invalid_email(self):
        with pytest.raises(ValidationError, match="@ sign"):
            CustomerDetails(**make_customer(email="no-at-sign"))

    def test_invalid_phone(self):
        with pytest.raises(ValidationError, match="valid phone number"):
            CustomerDetails(**make_customer(phone="07400 12"))

    def test_country_must_be_two_letters(self):
        with pytest.raises(ValidationError):
            CustomerDetails(**make_customer(country="GBR"))
