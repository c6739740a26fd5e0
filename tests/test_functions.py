import pytest

from model.hts import MetalType
from util.constants import DEFAULT_SEARCH_ERROR
from util.errors import BackendProtocolError, BackendTransportError
from util.functions import (
    clean_error_message,
    clip_words,
    is_valid_hts_code,
    validate_entry_fields,
)


@pytest.mark.parametrize(
    "code", ["7604", "7604.10", "7604.10.50", "7604.10-7606.90", "7604 - 7606"]
)
def test_valid_hts_codes(code):
    assert is_valid_hts_code(code)


@pytest.mark.parametrize("code", ["", "   ", None, "abc", "7604a", "7604-", "76/04"])
def test_invalid_hts_codes(code):
    assert not is_valid_hts_code(code)


def test_validate_entry_fields_ok():
    assert validate_entry_fields("7604.10", "Aluminum Bars", "Bars and rods") == {}


def test_validate_entry_fields_reports_each_field():
    errors = validate_entry_fields("", " ", "")

    assert errors == {
        "code": "HTS Code is required",
        "category": "Category name is required",
        "description": "Rule detail is required",
    }


def test_validate_entry_fields_bad_format():
    errors = validate_entry_fields("abc", "Bars", "Rule")

    assert errors == {"code": "Invalid format (digits/dots only, e.g. 7604.10)"}


class TestCleanErrorMessage:
    def test_strips_sdk_prefix(self):
        assert clean_error_message("GoogleGenAIError: quota exceeded") == "quota exceeded"

    def test_strips_generic_prefix_case_insensitive(self):
        assert clean_error_message("error:  bad gateway") == "bad gateway"

    def test_uses_backend_error_message(self):
        err = BackendTransportError("gemini returned status 500: boom", status_code=500)

        assert clean_error_message(err) == "gemini returned status 500: boom"

    def test_strips_own_type_prefix(self):
        assert clean_error_message("BackendProtocolError: empty body") == "empty body"

    @pytest.mark.parametrize("value", [None, "", "Error:   "])
    def test_falls_back_to_default(self, value):
        assert clean_error_message(value) == DEFAULT_SEARCH_ERROR

    def test_plain_exception(self):
        assert clean_error_message(BackendProtocolError("No response from Gemini.")) == (
            "No response from Gemini."
        )


def test_clip_words():
    text = " ".join(str(i) for i in range(50))

    assert clip_words(text, max_words=40).endswith("39 …")
    assert clip_words("short text", max_words=40) == "short text"


def test_validate_entry_fields_metal_type():
    assert validate_entry_fields("7604", "Bars", "Rule", MetalType.both) == {}
    assert set(validate_entry_fields("7604", "Bars", "Rule", MetalType.unknown)) == {"metalType"}
