class GradingError(Exception):
    """Base class for every error raised by the grading services."""


class InvalidScoreError(GradingError, ValueError):
    """
    A mark handed to the engine is unusable: max score <= 0, a negative
    raw score, or a percentage that is not a finite number.
    """

    def __init__(self, message, *, raw_score=None, max_score=None):
        super().__init__(message)
        self.raw_score = raw_score
        self.max_score = max_score


class ConfigurationError(GradingError):
    """
    Reference data is wrong: a scale with no bands or with gaps/overlaps,
    weights that do not add up, or an unusable aggregation setting.
    """

    def __init__(self, message, *, scale=None, percentage=None, problems=None):
        super().__init__(message)
        self.scale = scale
        self.percentage = percentage
        self.problems = list(problems or [])
