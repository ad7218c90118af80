"""
Error types raised by the analysis stages
"""


class AnalysisError(Exception):
    """Base error carrying the failing stage and the offending input"""

    def __init__(self, message, stage=None, source=None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.source = source

    def __str__(self):
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        parts.append(self.message)
        if self.source is not None:
            parts.append(f"(input: {self.source})")
        return ' '.join(parts)


class DataLoadError(AnalysisError):
    """The data file is missing or cannot be parsed"""

    def __init__(self, message, source=None):
        super().__init__(message, stage='load', source=source)


class DataValidationError(AnalysisError):
    """The data file does not match the expected schema or contains missing values"""

    def __init__(self, message, source=None):
        super().__init__(message, stage='load', source=source)


class DegenerateFoldError(AnalysisError):
    """A cross-validation fold cannot be fitted or scored"""

    def __init__(self, message, family=None, params=None, fold=None):
        super().__init__(message, stage='train', source=family)
        self.family = family
        self.params = params
        self.fold = fold


class ModelFitError(AnalysisError):
    """No hyperparameter combination of a model family could be fitted"""

    def __init__(self, message, family=None):
        super().__init__(message, stage='train', source=family)
        self.family = family
