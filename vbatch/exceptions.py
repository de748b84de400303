"""Custom exceptions for the vbatch transcoding pipeline"""

from typing import Optional


class VbatchError(Exception):
    """
    Base exception for all vbatch errors.

    Attributes:
        message (str): A description of the error.
        module (str): The module where the error originated.

    Usage:
        raise VbatchError("An error occurred", module="supervisor")
    """
    def __init__(self, message: str, module: str = None):
        self.message = message
        self.module = module
        super().__init__(f"[{module or 'unknown'}] {message}")


class ConfigurationError(VbatchError):
    """
    Exception raised when the supplied settings are invalid.
    """
    pass


class DependencyError(VbatchError):
    """
    Exception raised when the ffmpeg capability listing cannot be obtained.

    This indicates that the external encoder binary is missing, not executable,
    or failed while listing its encoders.
    """
    pass


class EncoderUnavailableError(DependencyError):
    """
    Exception raised when the requested encoder is not offered by ffmpeg.

    Fatal and non-retryable: no job is started.
    """
    def __init__(self, codec: str, module: str = None):
        self.codec = codec
        super().__init__(
            f"Encoder {codec} is not available, choose another encoder",
            module
        )


class TraversalError(VbatchError):
    """
    Exception raised when walking the input directory tree fails.

    Aborts the whole batch.
    """
    def __init__(self, message: str, path: Optional[str] = None, module: str = None):
        self.path = path
        super().__init__(message, module)


class CommandExecutionError(VbatchError):
    """
    Exception raised when the encoder process cannot be started.
    """
    pass


class EncodingError(VbatchError):
    """
    Exception raised when the encoder process exits with a non-zero status.
    """
    def __init__(self, message: str, exit_code: Optional[int] = None, module: str = None):
        self.exit_code = exit_code
        super().__init__(message, module)
