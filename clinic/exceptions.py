"""Domain errors and their HTTP status mapping"""


class ClinicError(Exception):
    """Base class for errors that map to a client-facing response"""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ClinicError):
    status_code = 404


class InvalidClaimError(ClinicError):
    """OTP claim did not match"""

    status_code = 400


class InvalidTransitionError(ClinicError):
    """Transition is not defined for the appointment's current status"""

    status_code = 409


class ConflictError(ClinicError):
    """Stale sitting number or a concurrent write to the same record"""

    status_code = 409


class ChannelFailure(ClinicError):
    """Outbound notification could not be delivered"""

    status_code = 500


class InvalidRequestError(ClinicError):
    """Request is well-formed but missing data the operation needs"""

    status_code = 422
