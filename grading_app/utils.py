from rest_framework import serializers

from grading_app.exceptions import ConfigurationError, InvalidScoreError


class LabelChoiceField(serializers.ChoiceField):
    """Accepts either the stored value ("TERM_1") or its label ("Term 1", any case)."""

    def to_internal_value(self, data):
        data_str = str(data)
        if data_str in self.choices:
            return data_str
        for key, label in self.choices.items():
            if str(label).lower() == data_str.lower():
                return key
        self.fail('invalid_choice', input=data)


def grading_error_payload(exc) -> dict:
    """Response body for an engine error."""
    if isinstance(exc, InvalidScoreError):
        code = "INVALID_SCORE"
    elif isinstance(exc, ConfigurationError):
        code = "CONFIGURATION_ERROR"
    else:
        code = "GRADING_ERROR"
    return {"code": code, "detail": str(exc)}
