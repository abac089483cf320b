"""
Various seasontri utilities. Contains convenience functions in support of
the sample datasets and synthetic quarterly loss data.
"""
import pandas as pd
from . import triangle
from .seasonality import calendar_quarter



def _load(dataset, tri_type=None, dataref=None):
    """
    Load the specified sample dataset. If ``tri_type`` is not None, return sample
    dataset as specified triangle (one of ``{"cum", "incr"}``).

    Parameters
    ----------
    dataset: str
        Specifies which sample dataset to load. The complete set of sample
        datasets can be obtained by calling ``get_datasets``.

    tri_type: ``None`` or {"incr", "cum"}
        If ``None``, data subset is returned as pd.DataFrame. Otherwise,
        return subset as either incremental or cumulative triangle type.
        Default value is None.

    dataref: dict
        Mapping of dataset names to file locations.

    Returns
    -------
    Either pd.DataFrame, seasontri.triangle.IncrTriangle or seasontri.triangle.CumTriangle.
    """
    if dataset not in dataref.keys():
        raise KeyError("Specified dataset does not exist: `{}`".format(dataset))

    data_path = dataref[dataset]
    loss_data = pd.read_csv(data_path, delimiter=",")
    loss_data = loss_data[["origin", "dev", "value"]].reset_index(drop=True)

    if tri_type is not None:
        if not tri_type.startswith(("c", "i")):
            raise ValueError("tri_type must be one of {{'cum', 'incr'}}, not `{}`.".format(tri_type))
        loss_data = triangle.totri(loss_data, tri_type=tri_type)

    return(loss_data)


def _get_datasets(dataref):
    """
    Generate a list containing the names of available sample datasets.

    Parameters
    ----------
    dataref: dict
        Mapping of dataset names to file locations.

    Returns
    -------
    list
        Names of available sample datasets.
    """
    return(sorted(dataref.keys()))


def simulate(nbr_origins=8, amounts=None, nbr_quarters=4, train_only=True):
    """
    Generate a synthetic quarterly loss dataset in which every incremental
    amount depends only on the calendar quarter of the cell. Since each
    origin's development spans the same number of calendar periods, the
    true ultimate is identical for all origins once ``nbr_origins`` is a
    multiple of ``nbr_quarters``.

    Parameters
    ----------
    nbr_origins: int
        Number of origin (and development) periods. Defaults to 8.

    amounts: dict
        Incremental amount by calendar quarter. Defaults to
        ``{1: 100, 2: 50, 3: 50, 4: 40}``.

    nbr_quarters: int
        Number of calendar quarters per seasonal cycle. Defaults to 4.

    train_only: bool
        If True, only the upper-left (observed) portion of the triangle is
        returned. Otherwise, the complete square is returned. Defaults to
        True.

    Returns
    -------
    pd.DataFrame
        Fields ``origin``, ``dev`` and ``value``.
    """
    amounts_ = {1: 100., 2: 50., 3: 50., 4: 40.} if amounts is None else amounts
    missing = sorted(set(range(1, nbr_quarters + 1)) - set(amounts_.keys()))
    if missing:
        raise ValueError("amounts missing for quarter(s) {}.".format(missing))

    records = list()
    for origin in range(1, nbr_origins + 1):
        for dev in range(1, nbr_origins + 1):
            if train_only and dev > (nbr_origins - origin + 1):
                break
            quarter = calendar_quarter(origin + dev - 1, nbr_quarters=nbr_quarters)
            records.append((origin, dev, float(amounts_[quarter])))

    return(pd.DataFrame.from_records(records, columns=["origin", "dev", "value"]))
