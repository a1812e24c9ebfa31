"""
Unit tests for the intake request models.
"""

import pytest
from pydantic import ValidationError

from app.models.intake import RegistrationRequest, UploadedFile


class TestRegistrationRequest:

    def test_accepts_camel_case_wire_names(self):
        req = RegistrationRequest.model_validate({
            "companyName": "Acme",
            "firstName": "A",
            "lastName": "B",
            "email": "a@b.com",
            "companyWebsite": "acme.com",
            "phoneNumber": "5551234567",
        })
        assert req.company_name == "Acme"
        assert req.company_website == "acme.com"
        assert req.phone_number == "5551234567"

    def test_email_is_required(self):
        with pytest.raises(ValidationError):
            RegistrationRequest.model_validate({"companyName": "Acme"})

    def test_blank_email_is_rejected(self):
        with pytest.raises(ValidationError):
            RegistrationRequest.model_validate({"email": "   "})

    def test_email_format_is_not_checked(self):
        req = RegistrationRequest.model_validate({"email": "not-an-email"})
        assert req.email == "not-an-email"

    def test_optional_fields_default_to_empty(self):
        req = RegistrationRequest.model_validate({"email": "a@b.com", "phoneNumber": None})
        assert req.phone_number == ""
        assert req.company_website == ""

    def test_numeric_phone_is_coerced_to_string(self):
        req = RegistrationRequest.model_validate({"email": "a@b.com", "phoneNumber": 5551234567})
        assert req.phone_number == "5551234567"

    def test_unknown_fields_ignored(self):
        req = RegistrationRequest.model_validate({"email": "a@b.com", "utm_source": "ad"})
        assert not hasattr(req, "utm_source")


class TestUploadedFile:

    def test_declared_extension_keeps_case(self):
        assert UploadedFile(name="Scan.PDF", content=b"x").declared_extension == ".PDF"

    def test_no_extension(self):
        assert UploadedFile(name="scan", content=b"x").declared_extension == ""

    def test_size(self):
        assert UploadedFile(name="a.pdf", content=b"12345").size == 5
