# backend/pipeline/errors.py
"""Error kinds raised by the upload -> generation -> persistence chain.

Each error carries the HTTP status the API layer answers with.
"""


class PipelineError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthenticated(PipelineError):
    status_code = 401


class Forbidden(PipelineError):
    status_code = 403


class InvalidInput(PipelineError):
    status_code = 400


class UnsupportedFormat(InvalidInput):
    pass


class NotFound(PipelineError):
    status_code = 404


class ExtractionFailed(PipelineError):
    pass


class GenerationFailed(PipelineError):
    pass


class PersistenceFailed(PipelineError):
    pass
