class MpesaError(Exception):
    error = "M-Pesa error"

    def __init__(self, message, status_code=None, response_data=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data


class ConfigurationError(MpesaError):
    error = "Configuration error"


class ValidationError(MpesaError):
    error = "Validation error"


class AuthenticationError(MpesaError):
    error = "Authentication error"


class RequestError(MpesaError):
    error = "Request error"
