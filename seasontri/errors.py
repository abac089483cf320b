"""
Exceptions raised by the seasonality adjustment pipeline. Every exception
aborts the run at the point of detection; nothing is retried or coerced.
"""



class SeasonalityError(ValueError):
    """
    Base class for seasontri errors.
    """


class InsufficientDataError(SeasonalityError):
    """
    No origin period provides a complete seasonal cycle, so relativities
    cannot be estimated.
    """


class MissingRelativityError(SeasonalityError, KeyError):
    """
    An observation falls in a calendar quarter with no relativity factor.
    """
    def __str__(self):
        # KeyError would otherwise repr() the message.
        return(str(self.args[0]) if self.args else "")


class DuplicateCellError(SeasonalityError):
    """
    Observed and forecast cells overlap when merging the completed triangle.
    """


class InvalidInputError(SeasonalityError):
    """
    Loss amounts are negative or non-finite, period identifiers are not
    1-based integer indices, or relativity factors are not positive.
    """
