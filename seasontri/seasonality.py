"""
Seasonality adjustment for quarterly loss development data.

Loss observations are bucketed by calendar quarter, where the calendar
period of the cell at origin period ``o`` and development period ``d`` is
``o + d - 1`` and the quarter is the calendar period modulo 4 (a remainder
of 0 maps to quarter 4). The adjustment runs in four stages:

    1. ``estimate_relativities``: Seasonal relativity factor by quarter,
       measured over the first full cycle of development of each origin.

    2. ``adjust``: Divide each observation by its quarter's relativity,
       yielding a seasonality-neutral series.

    3. Chain ladder projection of the neutral series (see
       ``seasontri.estimators.base.BaseChainLadder``).

    4. ``finalize``: Multiply projected cells beyond the observed horizon,
       or without an actual record, by their quarter's relativity and merge
       them with the original observations.

All functions operate on tabular data with fields ``origin``, ``dev``
and ``value``, as returned by ``observations``, and return new DataFrames.
Inputs are never modified.
"""
import logging
import warnings
import numpy as np
import pandas as pd
from .errors import (
    DuplicateCellError, InsufficientDataError, InvalidInputError,
    MissingRelativityError,
    )
from .triangle import _cum2incr, _melt

logger = logging.getLogger(__name__)



def calendar_quarter(calendar, nbr_quarters=4):
    """
    Map calendar periods to seasonal buckets ``1..nbr_quarters``.

    Parameters
    ----------
    calendar: int, np.ndarray or pd.Series
        1-based calendar period(s).

    nbr_quarters: int
        Number of buckets per seasonal cycle. Defaults to 4.

    Returns
    -------
    Same type as ``calendar``.
    """
    return(((calendar - 1) % nbr_quarters) + 1)


def to_period_index(data, origin="origin", dev="dev"):
    """
    Relabel origin and development periods as dense 1-based indices, e.g.
    origin years 2011-2018 become 1-8 and development lags of 3, 6, 9
    months become 1, 2, 3. Use this to prepare loaded datasets labeled by
    year or by month of development for ``observations``.

    Parameters
    ----------
    data: pd.DataFrame
        Tabular loss data.

    origin: str
        The fieldname in ``data`` representing origin period.

    dev: str
        The fieldname in ``data`` representing development period.

    Returns
    -------
    pd.DataFrame
    """
    df = data.copy(deep=True)
    df[origin] = df[origin].rank(method="dense").astype(int)
    df[dev] = df[dev].rank(method="dense").astype(int)
    return(df)


def _validate_obs(data, allow_negative=False):
    """
    Check period indices and loss amounts, returning a copy of ``data``
    with integer ``origin`` and ``dev`` fields and a ``calendar`` field.
    Record order and index are preserved.
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError("`data` must be an instance of pd.DataFrame.")

    for field in ("origin", "dev", "value"):
        if field not in data.columns:
            raise AttributeError("`{}` not present in data.".format(field))

    df = data.copy(deep=True)

    for field in ("origin", "dev"):
        periods = pd.to_numeric(df[field], errors="coerce").astype(float)
        if periods.isna().any() or np.any(periods != np.floor(periods)) or np.any(periods < 1):
            raise InvalidInputError(
                "`{}` must contain 1-based integer period indices. Labels such "
                "as years can be converted with `to_period_index`.".format(field)
                )
        df[field] = periods.astype(int)

    values = pd.to_numeric(df["value"], errors="coerce").astype(float)
    if not np.all(np.isfinite(values)):
        raise InvalidInputError("Loss amounts must be finite.")
    if not allow_negative and np.any(values < 0):
        raise InvalidInputError(
            "Incremental loss amounts must be non-negative: {} negative value(s) found.".format(
                int((values < 0).sum())
                )
            )
    df["value"] = values
    df["calendar"] = df["origin"] + df["dev"] - 1
    return(df)


def _validate_relativities(relativities):
    """
    Coerce ``relativities`` to a pd.Series indexed by quarter, ensuring
    every factor is positive and finite.
    """
    rels = pd.Series(relativities, dtype=float)
    if not np.all(np.isfinite(rels.values)) or np.any(rels.values <= 0):
        raise InvalidInputError("Relativity factors must be positive and finite.")
    rels.index = rels.index.astype(int)
    return(rels)


def _bucket(data, nbr_quarters=4):
    """
    Attach calendar ``quarter`` to validated observations.
    """
    if int(nbr_quarters) < 1:
        raise ValueError("nbr_quarters must be a positive integer, not `{}`.".format(nbr_quarters))
    df = data.copy(deep=True)
    df["quarter"] = calendar_quarter(df["calendar"], nbr_quarters=int(nbr_quarters))
    return(df)


def observations(data, origin="origin", dev="dev", value="value", data_format="incr"):
    """
    Prepare tabular loss data for seasonality adjustment. The returned
    DataFrame has fields ``origin``, ``dev``, ``calendar`` and ``value``,
    holds one incremental amount per cell and is sorted by origin and
    development period.

    Parameters
    ----------
    data: pd.DataFrame
        Tabular loss data.

    origin: str
        The fieldname in ``data`` representing origin period (1-based
        integer index).

    dev: str
        The fieldname in ``data`` representing development period (1-based
        integer index).

    value: str
        The fieldname in ``data`` representing loss amounts.

    data_format: {"incr", "cum"}
        Whether the amounts in ``data`` are incremental or cumulative.
        Cumulative amounts are differenced by origin period. Default
        value is "incr".

    Returns
    -------
    pd.DataFrame

    Raises
    ------
    InvalidInputError
        If periods are not 1-based integer indices, or if incremental
        amounts are negative or non-finite.
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError("`data` must be an instance of pd.DataFrame.")
    for field in (origin, dev, value):
        if field not in data.columns:
            raise AttributeError("`{}` not present in data.".format(field))
    if not data_format.lower().strip().startswith(("i", "c")):
        raise ValueError("data_format must be one of {{'cum', 'incr'}}, not `{}`.".format(data_format))

    df = data[[origin, dev, value]].rename({origin: "origin", dev: "dev", value: "value"}, axis=1)
    df = _validate_obs(df, allow_negative=True)
    df = df.groupby(["origin", "dev"], as_index=False)["value"].sum()
    df = df.sort_values(by=["origin", "dev"]).reset_index(drop=True)

    if data_format.lower().strip().startswith("c"):
        incr = df.groupby("origin")["value"].diff(periods=1)
        df["value"] = np.where(np.isnan(incr), df["value"], incr)

    df = _validate_obs(df)
    return(df[["origin", "dev", "calendar", "value"]])


def estimate_relativities(data, nbr_quarters=4, complete_only=True):
    """
    Estimate a seasonal relativity factor for each calendar quarter.
    Observations are restricted to the first ``nbr_quarters`` development
    periods of each origin. For every origin retained, each quarter's
    amount is divided by the origin's average amount per quarter; the
    relativity for a quarter is the arithmetic mean of these ratios across
    origins.

    Parameters
    ----------
    data: pd.DataFrame
        Incremental observations, typically the output of ``observations``.

    nbr_quarters: int
        Number of calendar quarters per seasonal cycle. Defaults to 4.

    complete_only: bool
        If True, origins without an observation in every quarter of the
        cycle are excluded. If False, partial origins contribute using the
        average over the quarters present, and the resulting factors are
        rebalanced to average 1. Defaults to True.

    Returns
    -------
    pd.Series
        Relativity factors indexed by quarter, averaging 1.

    Raises
    ------
    InsufficientDataError
        If no origin period survives the completeness filter, or, when
        ``complete_only=False``, if some quarter is never observed.
    """
    obs = _bucket(_validate_obs(data), nbr_quarters=nbr_quarters)
    window = obs[obs["dev"] <= nbr_quarters]

    totals = window.groupby("origin")["value"].sum()
    nbr_buckets = window.groupby("origin")["quarter"].nunique()
    if complete_only:
        keep = nbr_buckets.index[nbr_buckets == nbr_quarters]
    else:
        keep = nbr_buckets.index

    # Seasonal shape cannot be measured for origins without losses.
    zero_origins = keep.intersection(totals.index[totals == 0])
    if zero_origins.size > 0:
        warnings.warn(
            "Origin period(s) {} have no losses in the first {} development "
            "periods and are ignored.".format(zero_origins.tolist(), nbr_quarters)
            )
        keep = keep.difference(zero_origins)

    if keep.size == 0:
        raise InsufficientDataError(
            "No origin period has a complete seasonal cycle of {} quarters "
            "within its first {} development periods.".format(nbr_quarters, nbr_quarters)
            )

    window = window[window["origin"].isin(keep)]
    grps = window.groupby("origin")["value"]
    denom = nbr_quarters if complete_only else grps.transform("size")
    expected = grps.transform("sum") / denom
    relativities = (window["value"] / expected).groupby(window["quarter"]).mean()

    missing = sorted(set(range(1, nbr_quarters + 1)) - set(relativities.index))
    if missing:
        raise InsufficientDataError(
            "No observations available for calendar quarter(s) {}.".format(missing)
            )

    if not complete_only:
        relativities = relativities / relativities.mean()

    relativities = relativities.sort_index().rename("relativity").astype(float)
    relativities.index = relativities.index.astype(int).rename("quarter")
    logger.debug(
        "Estimated relativities from %d of %d origin periods: %s",
        keep.size, totals.size, relativities.round(5).to_dict()
        )
    return(relativities)


def adjust(data, relativities, nbr_quarters=4):
    """
    Remove seasonality from observations by dividing each amount by the
    relativity factor of its calendar quarter. Elementwise and
    order-preserving.

    Parameters
    ----------
    data: pd.DataFrame
        Incremental observations, typically the output of ``observations``.

    relativities: pd.Series or dict
        Relativity factors indexed by quarter.

    nbr_quarters: int
        Number of calendar quarters per seasonal cycle. Defaults to 4.

    Returns
    -------
    pd.DataFrame
        Copy of ``data`` with ``calendar`` and ``quarter`` fields and
        seasonality-neutral ``value``.

    Raises
    ------
    MissingRelativityError
        If an observation's quarter has no relativity factor.

    Examples
    --------
    ::

        In [1]: import pandas as pd
        In [2]: from seasontri import adjust
        In [3]: obs = pd.DataFrame({"origin": [1], "dev": [1], "value": [100.]})
        In [4]: adjust(obs, {1: 1.52, 2: .76, 3: .76, 4: .61})["value"]
        Out[4]:
        0    65.789474
        Name: value, dtype: float64
    """
    return(_rescale(_validate_obs(data), relativities, nbr_quarters, np.divide))


def deadjust(data, relativities, nbr_quarters=4):
    """
    Restore seasonality by multiplying each amount by the relativity factor
    of its calendar quarter. Inverse of ``adjust``. Negative amounts are
    permitted, since projected cells are not constrained to be positive
    under user-selected development factors.

    Parameters
    ----------
    data: pd.DataFrame
        Seasonality-neutral incremental amounts.

    relativities: pd.Series or dict
        Relativity factors indexed by quarter.

    nbr_quarters: int
        Number of calendar quarters per seasonal cycle. Defaults to 4.

    Returns
    -------
    pd.DataFrame
    """
    return(_rescale(_validate_obs(data, allow_negative=True), relativities, nbr_quarters, np.multiply))


def _rescale(data, relativities, nbr_quarters, op):
    obs = _bucket(data, nbr_quarters=nbr_quarters)
    rels = _validate_relativities(relativities)
    missing = sorted(set(obs["quarter"].unique()) - set(rels.index))
    if missing:
        raise MissingRelativityError(
            "No relativity factor for calendar quarter(s) {}.".format(
                [int(ii) for ii in missing]
                )
            )
    obs["value"] = op(obs["value"].values, obs["quarter"].map(rels).values)
    return(obs)


def finalize(trisqrd, data, relativities, observed_horizon=None, nbr_quarters=4):
    """
    Restore seasonality to projected cells and merge them with the actual
    observations into a single completed triangle in tabular form.

    Parameters
    ----------
    trisqrd: pd.DataFrame
        Seasonality-neutral cumulative projection, indexed by origin with
        one column per development period, such as
        ``BaseChainLadderResult.trisqrd``. An ``ultimate`` column, if
        present, is ignored.

    data: pd.DataFrame
        The original (unadjusted) incremental observations.

    relativities: pd.Series or dict
        Relativity factors indexed by quarter.

    observed_horizon: int
        Last observed calendar period. Projected cells with a later
        calendar period are forecasts, and must not coincide with actual
        observations. Projected cells at or before the horizon are
        forecasts only when ``data`` has no record for them, e.g. an
        unreported cell on the latest diagonal, or cells between the latest
        observed calendar period and a later ``observed_horizon``. Defaults
        to the latest calendar period in ``data``.

    nbr_quarters: int
        Number of calendar quarters per seasonal cycle. Defaults to 4.

    Returns
    -------
    pd.DataFrame
        Fields ``origin``, ``dev``, ``calendar``, ``quarter``, ``value``
        and ``rectype`` ("actual" or "forecast"), sorted by origin and
        development period.

    Raises
    ------
    DuplicateCellError
        If a forecast cell coincides with an actual observation.

    InvalidInputError
        If the projection leaves any cell missing.
    """
    actuals = _bucket(observations(data), nbr_quarters=nbr_quarters)
    if observed_horizon is None:
        observed_horizon = int(actuals["calendar"].max())

    sqrd = pd.DataFrame(trisqrd).drop("ultimate", axis=1, errors="ignore")
    if sqrd.isna().any().any():
        raise InvalidInputError(
            "Projected triangle has missing cells; check the selected development factors."
            )

    # Incremental forecasts are derived from the cumulative projection. Actual
    # cells are never replaced by their round-tripped counterparts, so cells
    # at or before the horizon are kept only where no actual exists.
    fcst = _validate_obs(_melt(_cum2incr(sqrd)), allow_negative=True)
    fcst_keys = pd.MultiIndex.from_frame(fcst[["origin", "dev"]])
    actual_keys = pd.MultiIndex.from_frame(actuals[["origin", "dev"]])
    unreported = ~fcst_keys.isin(actual_keys)
    fcst = fcst[(fcst["calendar"] > observed_horizon).values | unreported]
    fcst = deadjust(fcst, relativities, nbr_quarters=nbr_quarters)

    actuals["rectype"] = "actual"
    fcst["rectype"] = "forecast"

    overlap = actuals.merge(fcst, on=["origin", "dev"], how="inner")
    if overlap.shape[0] > 0:
        raise DuplicateCellError(
            "{} forecast cell(s) coincide with actual observations, e.g. "
            "(origin={}, dev={}).".format(
                overlap.shape[0], overlap["origin"].iat[0], overlap["dev"].iat[0]
                )
            )

    fields = ["origin", "dev", "calendar", "quarter", "value", "rectype"]
    completed = pd.concat([actuals[fields], fcst[fields]], ignore_index=True)
    logger.debug(
        "Merged %d actual and %d forecast cells, observed horizon at calendar period %d",
        actuals.shape[0], fcst.shape[0], observed_horizon
        )
    return(completed.sort_values(by=["origin", "dev"]).reset_index(drop=True))
