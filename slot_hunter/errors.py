"""Exception taxonomy for the slot hunter."""


class PreconditionFailure(Exception):
    """Raised when the hunt cannot start at all."""

    pass


class TokenMissingError(PreconditionFailure):
    """No bearer token was supplied by the host."""

    pass


class TokenExpiredError(PreconditionFailure):
    """The supplied bearer token carries an expiry in the past."""

    pass


class ProfileResolutionError(PreconditionFailure):
    """The applicant profile could not be resolved from the case record."""

    pass


class TransientNetworkFailure(Exception):
    """Connection error or timeout while talking to the API."""

    pass


class RateLimited(TransientNetworkFailure):
    """The API answered 403 to a slot query."""

    pass


class ReservationNetworkError(Exception):
    """Transport failure while reserving or verifying.

    Never retried: the reserve endpoint is stateful and a blind retry could
    submit the same booking twice.
    """

    pass


class TwoFactorAbandoned(Exception):
    """No verification code was supplied, so the 2FA sub-flow gave up."""

    pass
