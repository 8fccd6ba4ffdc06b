class PipelineError(Exception):
    """Base error for a failed pipeline run.

    Carries the stage the failure happened in and the offending value so the
    run can be diagnosed and repeated.
    """
    stage = None

    def __init__(self, message, value=None, stage=None):
        super().__init__(message)
        self.value = value
        if stage is not None:
            self.stage = stage

    def __str__(self):
        msg = super().__str__()
        return f'[{self.stage}] {msg}' if self.stage else msg


class LoadError(PipelineError):
    stage = 'load'


class SchemaError(PipelineError):
    stage = 'load'


class DateParseError(PipelineError):
    stage = 'clean'


class UnmappedCategoryError(PipelineError):
    stage = 'aggregate_ethnicity'


class ConfigError(PipelineError):
    stage = 'config'
