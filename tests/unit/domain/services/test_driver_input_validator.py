"""Unit tests for DriverInputValidator."""

from decimal import Decimal

import pytest

from driverdesk.domain.services import DriverInputValidator, RawDriverInput, sanitize_input

COMPANY_ID = "3f2b8c1e-9a4d-4e7f-8b6a-1c2d3e4f5a6b"


@pytest.fixture
def validator() -> DriverInputValidator:
    return DriverInputValidator()


def make_input(**overrides) -> RawDriverInput:
    values = {
        "email": "Jane.Doe@Example.com",
        "first_name": "Jane",
        "last_name": "O'Neil",
        "phone": None,
        "organization_id": COMPANY_ID,
        "rates": {},
    }
    values.update(overrides)
    return RawDriverInput(**values)


class TestSanitizeInput:
    def test_removes_markup_and_quotes(self):
        assert sanitize_input('<script>"x"</script>') == "scriptx/script"

    def test_strips_control_characters_and_whitespace(self):
        assert sanitize_input("  Ja\x00ne\n ") == "Jane"

    def test_truncates_to_255_characters(self):
        assert len(sanitize_input("a" * 300)) == 255

    def test_non_string_becomes_empty(self):
        assert sanitize_input(None) == ""
        assert sanitize_input(42) == ""


class TestValidate:
    def test_valid_input_is_normalized(self, validator):
        result = validator.validate(make_input(), Decimal("1000"))

        assert result.is_valid
        assert result.issues == []
        data = result.normalized
        assert data.email == "jane.doe@example.com"
        # The apostrophe is stripped by sanitization before validation.
        assert data.last_name == "ONeil"
        assert data.organization_id == COMPANY_ID
        assert data.full_name == "Jane ONeil"

    def test_reports_every_issue_together(self, validator):
        result = validator.validate(
            make_input(
                email="not-an-email",
                first_name="J",
                last_name="D4ve",
                phone="12",
                organization_id="company-1",
                rates={"hourly_rate": "-1"},
            ),
            Decimal("1000"),
        )

        assert not result.is_valid
        assert result.normalized is None
        codes = {(issue.field, issue.code) for issue in result.issues}
        assert codes == {
            ("email", "invalid_email"),
            ("first_name", "name_length"),
            ("last_name", "name_characters"),
            ("phone", "invalid_phone"),
            ("company_id", "invalid_company_id"),
            ("hourly_rate", "rate_out_of_range"),
        }

    @pytest.mark.parametrize(
        "email",
        ["driver@mailinator.com", "driver@tempmail.org", "x@my.10minutemail.net"],
    )
    def test_rejects_disposable_domains(self, validator, email):
        result = validator.validate(make_input(email=email), Decimal("1000"))

        assert [issue.code for issue in result.issues] == ["disposable_email"]
        assert result.issues[0].message == "Disposable email addresses are not allowed"

    def test_custom_disposable_domains(self):
        validator = DriverInputValidator(disposable_domains=["throwaway"])

        assert validator.validate(make_input(email="a@mailinator.com"), Decimal("1")).is_valid
        assert not validator.validate(make_input(email="a@throwaway.io"), Decimal("1")).is_valid

    def test_name_length_bounds(self, validator):
        assert validator.validate(make_input(first_name="Al"), Decimal("1")).is_valid
        assert validator.validate(make_input(first_name="A" * 50), Decimal("1")).is_valid
        result = validator.validate(make_input(first_name="A" * 51), Decimal("1"))
        assert result.issues[0].message == "Name must be between 2-50 characters"

    def test_phone_is_optional_but_checked(self, validator):
        assert validator.validate(make_input(phone=""), Decimal("1")).normalized.phone is None
        ok = validator.validate(make_input(phone="+44 7700 900123"), Decimal("1"))
        assert ok.normalized.phone == "+44 7700 900123"

    def test_company_id_is_lowercased(self, validator):
        result = validator.validate(make_input(organization_id=COMPANY_ID.upper()), Decimal("1"))
        assert result.normalized.organization_id == COMPANY_ID

    def test_rates_are_inclusive_of_bounds(self, validator):
        result = validator.validate(
            make_input(rates={"parcel_rate": "0", "cover_rate": 50}),
            Decimal("50"),
        )

        assert result.is_valid
        assert result.normalized.rates == {"parcel_rate": Decimal("0"), "cover_rate": Decimal("50")}

    def test_rate_above_ceiling_names_the_ceiling(self, validator):
        result = validator.validate(make_input(rates={"hourly_rate": "1000.01"}), Decimal("1000"))

        assert result.issue_dicts() == [
            {
                "field": "hourly_rate",
                "message": "Hourly rate must be between 0-1000",
                "code": "rate_out_of_range",
            }
        ]

    @pytest.mark.parametrize("value", ["abc", "NaN", True, [1]])
    def test_non_numeric_rates_are_rejected(self, validator, value):
        result = validator.validate(make_input(rates={"parcel_rate": value}), Decimal("50"))
        assert [issue.code for issue in result.issues] == ["rate_out_of_range"]

    def test_absent_rates_are_omitted(self, validator):
        result = validator.validate(
            make_input(rates={"parcel_rate": None, "cover_rate": "  "}),
            Decimal("50"),
        )
        assert result.normalized.rates == {}

    def test_negative_ceiling_is_a_programming_error(self, validator):
        with pytest.raises(ValueError):
            validator.validate(make_input(), Decimal("-1"))
