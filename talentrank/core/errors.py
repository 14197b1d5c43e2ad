"""Error types raised by the scoring engine."""


class TalentRankError(Exception):
    """Base class for errors raised by talentrank."""


class InvalidBatchError(TalentRankError, ValueError):
    """A scoring batch was rejected before any candidate was processed."""


class PersistenceError(TalentRankError):
    """A match result could not be written to the sink."""
