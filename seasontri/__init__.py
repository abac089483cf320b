"""
seasontri

Seasonality-Adjusted Loss Development Triangles.
"""
from functools import partial
from .datasets import dataref
from .errors import (
    SeasonalityError, InsufficientDataError, MissingRelativityError,
    DuplicateCellError, InvalidInputError,
    )
from .triangle import totri
from .seasonality import (
    observations, calendar_quarter, to_period_index, estimate_relativities,
    adjust, deadjust, finalize,
    )
from .estimators.base import BaseChainLadder
from .estimators.seasonal import SeasonalChainLadder
from .utils import _load, _get_datasets, simulate


# Initialize dataset loading utilities.
load = partial(_load, dataref=dataref)
get_datasets = partial(_get_datasets, dataref=dataref)

__version__ = '0.1.0'
