"""
Exceptions raised by the bracket engine, registration and storage layers.
"""


class BracketError(Exception):
    """Base class for all tournament errors. status_code is used by the web API."""
    status_code = 400


class InsufficientParticipants(BracketError):
    """Fewer than two eligible teams were supplied to the fixture generator."""


class MatchNotFound(BracketError):
    status_code = 404

    def __init__(self, match_id):
        super().__init__(f"Match {match_id} not found in schedule")
        self.match_id = match_id


class InvalidScore(BracketError):
    """A score was not a non-negative integer."""


class MatchAlreadyCompleted(BracketError):
    status_code = 409

    def __init__(self, match_id):
        super().__init__(f"Match {match_id} is already completed")
        self.match_id = match_id


class OverrideNotConfirmed(BracketError):
    """A score override was requested without explicit confirmation."""


class InvalidTournament(BracketError):
    pass


class RegistrationError(BracketError):
    pass


class InvalidRegistration(RegistrationError):
    pass


class DuplicateTeamName(RegistrationError):
    status_code = 409


class RegistrationFull(RegistrationError):
    status_code = 409


class RegistrationAlreadyDecided(RegistrationError):
    status_code = 409


class DocumentNotFound(BracketError):
    status_code = 404


class VersionConflict(BracketError):
    """The stored document changed since it was read."""
    status_code = 409
