"""
Unit tests for form helpers.
"""

import pytest

from internship_portal.models.feedback import Review
from internship_portal.utils.errors import FormValidationError
from internship_portal.utils.forms import build_model, require_text


class TestBuildModel:
    """Test cases for build_model."""

    def test_valid_data_builds_model(self):
        review = build_model(
            Review,
            {"student_id": "4", "company_id": "c1", "rating": 5, "comment": "Great mentors overall."},
        )
        assert review.rating == 5

    def test_invalid_field_becomes_form_error(self):
        """Test that the first invalid field is carried on the error."""
        # Act
        with pytest.raises(FormValidationError) as exc_info:
            build_model(
                Review,
                {"student_id": "4", "company_id": "c1", "rating": 9, "comment": "Great mentors overall."},
            )

        # Assert
        assert exc_info.value.field == "rating"
        assert exc_info.value.message.startswith("rating:")
        assert exc_info.value.kind == "validation_error"


class TestRequireText:
    """Test cases for require_text."""

    def test_returns_stripped_value(self):
        assert require_text("  Maria  ", "name", "Name is required") == "Maria"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_values_rejected(self, value):
        with pytest.raises(FormValidationError) as exc_info:
            require_text(value, "phone", "Phone number is required")

        assert exc_info.value.field == "phone"
        assert exc_info.value.message == "Phone number is required"
