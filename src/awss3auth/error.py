"""
Exception classes for awss3auth
"""


class SigningException(Exception):
    """
    Base exception for all request signing errors.
    """

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigurationError(SigningException):
    """Thrown when credentials or signer settings are missing or invalid."""

    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidConfiguration")


class MissingCredentialError(ConfigurationError):
    """Thrown when a credential field is missing or empty."""

    def __init__(self, field_name: str):
        super().__init__(f"Credential field '{field_name}' is missing or empty.")
        self.field_name = field_name


class UnknownAuthConfigError(ConfigurationError):
    """Thrown when no credentials can be found for an auth configuration id."""

    def __init__(self, authcfg: str):
        super().__init__(f"No AWS S3 credentials found for auth configuration '{authcfg}'.")
        self.authcfg = authcfg


class EncodingError(SigningException):
    """Thrown when a URL, path, query or header cannot be canonically encoded."""

    def __init__(self, message: str):
        super().__init__(message, error_code="InvalidEncoding")
