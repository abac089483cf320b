"""
This module contains the definitions of both the ``IncrTriangle`` and
``CumTriangle`` classes. Users should avoid instantiating ``IncrTriangle``
or ``CumTriangle`` instances directly; rather the dataset and triangle
arguments should be passed to ``totri``, which will return either an
instance of ``CumTriangle`` or ``IncrTriangle``, depending on the argument
specified for ``tri_type``.

Cells outside of the observed region of a triangle are represented by
``NaN``, never by zero.
"""
import itertools
import numpy as np
import pandas as pd
from scipy import stats
from .estimators.base import BaseChainLadder



def _melt(tri, origin="origin", dev="dev", value="value", dropna=True):
    """
    Transform a triangle-shaped DataFrame (origin periods as index,
    development periods as columns) into tabular ``origin, dev, value``
    records. The ``dev`` field keeps the dtype of the triangle's columns.

    Parameters
    ----------
    tri: pd.DataFrame
        Triangle-shaped data.

    origin: str
        Name of the origin field in the returned DataFrame.

    dev: str
        Name of the development period field in the returned DataFrame.

    value: str
        Name of the value field in the returned DataFrame.

    dropna: bool
        Should records with NA values be dropped? Default value is True.

    Returns
    -------
    pd.DataFrame
    """
    tri = pd.DataFrame(tri)
    df = tri.rename_axis(origin).reset_index(drop=False)
    df = pd.melt(df, id_vars=[origin], var_name=dev, value_name=value)
    # melt returns development periods as object.
    df[dev] = df[dev].astype(tri.columns.dtype)
    if dropna:
        df = df[df[value].notna()]
    df = df.astype({value: float})
    df = df[[origin, dev, value]].sort_values(by=[origin, dev])
    return(df.reset_index(drop=True))


def _cum2incr(tri):
    """
    Difference a cumulative triangle-shaped DataFrame across development
    periods. The first development period is carried over as-is, i.e.
    cumulative values at development period 0 are taken to be 0.

    Parameters
    ----------
    tri: pd.DataFrame
        Cumulative triangle-shaped data.

    Returns
    -------
    pd.DataFrame
    """
    incrtri = pd.DataFrame(tri).diff(axis=1)
    incrtri.iloc[:, 0] = pd.DataFrame(tri).iloc[:, 0]
    return(incrtri)



class _BaseTriangle(pd.DataFrame):

    def __init__(self, data, origin=None, dev=None, value=None):
        """
        Transforms ``data`` into a triangle instance.

        Parameters
        ----------
        data: pd.DataFrame
            The dataset to be transformed into a ``_BaseTriangle`` instance.
            ``data`` must be tabular loss data with at minimum columns
            representing the origin period, the development period and the
            actual loss amount, given by ``origin``, ``dev`` and ``value``
            arguments.

        origin: str
            The fieldname in ``data`` representing origin period.

        dev: str
            The fieldname in ``data`` representing development period.

        value: str
            The fieldname in ``data`` representing loss amounts.
        """
        self._validate(data, origin=origin, dev=dev, value=value)
        origin_ = "origin" if origin is None else origin
        dev_ = "dev" if dev is None else dev
        value_ = "value" if value is None else value

        data2 = data[[origin_, dev_, value_]].copy(deep=True)
        data2 = data2.groupby([origin_, dev_], as_index=False)[value_].sum(min_count=1)
        data2 = data2.sort_values(by=[origin_, dev_])
        tri = data2.pivot(index=origin_, columns=dev_, values=value_).rename_axis(None)
        tri.columns.name = None

        # Force all triangle cells to be of type float.
        tri = tri.astype(float)

        super().__init__(tri)

        self.origin = origin_
        self.value = value_
        self.dev = dev_

        # Properties.
        self._latest_by_origin = None
        self._nbr_cells = None
        self._maturity = None
        self._devp = None
        self._latest = None
        self._origins = None
        self._rlvi = None


    @staticmethod
    def _validate(data, origin=None, dev=None, value=None):
        """
        Ensure data has requisite columns.

        Parameters
        ----------
        data: pd.DataFrame
            Initial dataset to be coerced to triangle.

        origin: str
            The fieldname in ``data`` representing origin period.

        dev: str
            The fieldname in ``data`` representing development period.

        value: str
            The fieldname in ``data`` representing loss amounts.
        """
        if not isinstance(data, pd.DataFrame):
            raise TypeError("`data` must be an instance of pd.DataFrame.")

        origin_ = "origin" if origin is None else origin
        if origin_ not in data.columns:
            raise AttributeError("`{}` not present in data.".format(origin_))

        dev_ = "dev" if dev is None else dev
        if dev_ not in data.columns:
            raise AttributeError("`{}` not present in data.".format(dev_))

        value_ = "value" if value is None else value
        if value_ not in data.columns:
            raise AttributeError("`{}` not present in data.".format(value_))


    @property
    def nbr_cells(self):
        """
        Return the number of non-NaN cells.

        Returns
        -------
        int
        """
        if self._nbr_cells is None:
            self._nbr_cells = int(self.count().sum())
        return(self._nbr_cells)


    @property
    def rlvi(self):
        """
        Determine the last valid index by origin.

        Returns
        -------
        pd.DataFrame
        """
        if self._rlvi is None:
            self._rlvi = pd.DataFrame({
                "dev": self.apply(lambda x: x.last_valid_index(), axis=1).values
                }, index=self.index)
            self._rlvi["col_offset"] = \
                self._rlvi["dev"].map(lambda x: self.columns.get_loc(x))
        return(self._rlvi)


    @property
    def latest(self):
        """
        Return the values on the triangle's latest diagonal. Loss amounts
        are given, along with the associated origin period and development
        period. The latest loss amount by origin alone can be obtained
        by calling ``self.latest_by_origin``.

        Returns
        -------
        pd.DataFrame
        """
        if self._latest is None:
            self._latest = pd.DataFrame({
                "origin": self.index.values,
                "dev": self.rlvi["dev"].values,
                "latest": [
                    self.iat[ii, jj] for ii, jj in enumerate(self.rlvi["col_offset"].values)
                    ],
                })
        return(self._latest[["origin", "dev", "latest"]].sort_index())


    @property
    def latest_by_origin(self):
        """
        Return the latest loss amounts by origin period.

        Returns
        -------
        pd.Series
        """
        if self._latest_by_origin is None:
            self._latest_by_origin = pd.Series(
                data=self.latest["latest"].values, index=self.latest["origin"].values,
                name="latest_by_origin")
        return(self._latest_by_origin.sort_index())


    @property
    def devp(self):
        """
        Return triangle's development periods.

        Returns
        -------
        pd.Series
        """
        if self._devp is None:
            self._devp = pd.Series(self.columns, name="devp")
        return(self._devp.sort_index())


    @property
    def origins(self):
        """
        Return triangle's origin periods.

        Returns
        -------
        pd.Series
        """
        if self._origins is None:
            self._origins = pd.Series(self.index, name="origin")
        return(self._origins.sort_index())


    @property
    def maturity(self):
        """
        Return the maturity for each origin period, i.e. the latest
        development period with actual data.

        Returns
        -------
        pd.Series
        """
        if self._maturity is None:
            self._maturity = pd.Series(
                data=self.rlvi["dev"].values, index=self.index, name="maturity")
        return(self._maturity.sort_index())


    def to_tbl(self, dropna=True):
        """
        Transform triangle instance into a tabular representation.

        Parameters
        ----------
        dropna: bool
            Should records with NA values be dropped? Default value is True.

        Returns
        -------
        pd.DataFrame
        """
        return(_melt(self, origin=self.origin, dev=self.dev, value=self.value, dropna=dropna))


    def __str__(self):
        formats = {devp: "{:,.0f}".format for devp in self.columns}
        return(self.to_string(formatters=formats))


    def __repr__(self):
        formats = {devp: "{:,.0f}".format for devp in self.columns}
        return(self.to_string(formatters=formats))



class IncrTriangle(_BaseTriangle):
    """
    Incremental triangle class definition.
    """
    def __init__(self, data, origin=None, dev=None, value=None):
        """
        Parameters
        ----------
        data: pd.DataFrame
            The dataset to be transformed into a triangle instance.
            ``data`` must be tabular loss data with at minimum columns
            representing the origin period, development period and
            incremental value of interest, given by ``origin``, ``dev``
            and ``value`` respectively.

        origin: str
            The fieldname in ``data`` representing origin period.

        dev: str
            The fieldname in ``data`` representing development period.

        value: str
            The fieldname in ``data`` representing loss amounts.
        """
        super().__init__(data, origin=origin, dev=dev, value=value)


    def to_cum(self):
        """
        Transform triangle instance into cumulative representation.

        Returns
        -------
        seasontri.triangle.CumTriangle
        """
        return(CumTriangle(self.to_tbl(), origin=self.origin, dev=self.dev, value=self.value))



class CumTriangle(_BaseTriangle):
    """
    Cumulative triangle class definition.
    """
    def __init__(self, data, origin=None, dev=None, value=None):
        """
        Transforms ``data`` into a cumulative triangle instance.

        Parameters
        ----------
        data: pd.DataFrame
            The dataset to be transformed into a triangle instance.
            ``data`` must be tabular loss data with at minimum columns
            representing the origin period, development period and
            incremental value of interest, given by ``origin``, ``dev``
            and ``value`` respectively.

        origin: str
            The fieldname in ``data`` representing the origin period.

        dev: str
            The fieldname in ``data`` representing the development period.

        value: str
            The fieldname in ``data`` representing incremental loss amounts.
        """
        self._validate(data, origin=origin, dev=dev, value=value)
        origin_ = "origin" if origin is None else origin
        dev_ = "dev" if dev is None else dev
        value_ = "value" if value is None else value

        data2 = data[[origin_, dev_, value_]].copy(deep=True)
        data2 = data2.groupby([origin_, dev_], as_index=False)[value_].sum(min_count=1)
        data2 = data2.sort_values(by=[origin_, dev_]).reset_index(drop=True)
        data2[value_] = data2.groupby(origin_)[value_].cumsum()
        super().__init__(data=data2, origin=origin_, dev=dev_, value=value_)

        # Properties.
        self._a2a = None


    @staticmethod
    def _geometric(vals):
        """
        Compute the geometric average of the elements of ``vals``.

        Parameters
        ----------
        vals: np.ndarray
            An array of values, typically representing link ratios from a
            single development period.

        Returns
        -------
        float
        """
        arr = np.asarray(vals, dtype=float)
        return(np.nan if arr.size == 0 else float(stats.gmean(arr)))


    @staticmethod
    def _simple(vals):
        """
        Compute the simple average of elements of ``vals``.

        Parameters
        ----------
        vals: np.ndarray
            An array of values, typically representing link ratios from a
            single development period.

        Returns
        -------
        float
        """
        arr = np.asarray(vals, dtype=float)
        return(np.nan if arr.size == 0 else float(arr.mean()))


    @staticmethod
    def _medial(vals):
        """
        Compute the medial average of elements in ``vals``. Medial average
        eliminates the min and max values, then returns the arithmetic
        average of the remaining items.

        Parameters
        ----------
        vals: np.ndarray
            An array of values, typically representing link ratios from a
            single development period.

        Returns
        -------
        float
        """
        arr_all = np.sort(np.asarray(vals, dtype=float))
        if arr_all.size == 0:
            avg = np.nan

        # Return first element of arr_all if all array elements are the same.
        elif np.all(arr_all == arr_all[0]):
            avg = arr_all[0]

        elif arr_all.size == 2:
            avg = arr_all.mean()

        else:
            arr = arr_all[np.logical_and(arr_all != arr_all.min(), arr_all != arr_all.max())]
            avg = np.nan if arr.size == 0 else arr.mean()

        return(float(avg))


    @property
    def a2a(self):
        """
        Compute adjacent proportions, a.k.a. link ratios.

        Returns
        -------
        pd.DataFrame
        """
        if self._a2a is None:
            tri = pd.DataFrame(self)
            self._a2a = tri.shift(periods=-1, axis=1) / tri
            self._a2a = self._a2a.dropna(axis=1, how="all").dropna(axis=0, how="all")
        return(self._a2a.sort_index())


    def a2a_avgs(self):
        """
        Compute age-to-age factors based on ``self.a2a`` table of adjacent
        proportions. Averages computed include "simple", "geometric", "medial"
        and "weighted", over all available periods ("all-<avg>") or the
        latest ``n`` periods ("<avg>-<n>").

        Returns
        -------
        pd.DataFrame
        """
        nbr_periods = list(range(1, self.index.size)) + [0]

        # Create lookup table for average functions.
        avgfuncs = {
            "simple"   :self._simple,
            "geometric":self._geometric,
            "medial"   :self._medial,
            "weighted" :None,
            }

        ldf_avg_lst = list(itertools.product(avgfuncs.keys(), nbr_periods))
        indxstrs = [
            "all-" + str(ii[0]) if ii[1] == 0 else "{}-{}".format(ii[0], ii[1])
                for ii in ldf_avg_lst
            ]

        tri = pd.DataFrame(self)
        _a2a_avgs = pd.DataFrame(index=indxstrs, columns=self.columns[:-1], dtype=float)

        for indxstr, (avgtype, duration) in zip(indxstrs, ldf_avg_lst):

            for col_indx, devp in enumerate(self.columns[:-1]):

                # Pairs of adjacent cumulative values observed at devp and devp + 1.
                devp_next = self.columns[col_indx + 1]
                pairs = tri[[devp, devp_next]].dropna(how="any")
                if duration > 0:
                    pairs = pairs.iloc[-duration:]

                if avgtype == "weighted":
                    denom = pairs[devp].sum()
                    iteravg = np.nan if denom == 0 else pairs[devp_next].sum() / denom

                else:
                    pairs = pairs[pairs[devp] != 0]
                    link_ratios = (pairs[devp_next] / pairs[devp]).values
                    iteravg = avgfuncs[avgtype](link_ratios[link_ratios > 0])

                _a2a_avgs.loc[indxstr, devp] = iteravg

        return(_a2a_avgs)


    def to_incr(self):
        """
        Obtain incremental triangle based on cumulative triangle instance.

        Returns
        -------
        seasontri.triangle.IncrTriangle

        Examples
        --------
        Convert existing cumulative triangle instance into an instance of
        ``seasontri.triangle.IncrTriangle``::

            In [1]: from seasontri import load, totri
            In [2]: cumtri = totri(load("qtr8"))
            In [3]: incrtri = cumtri.to_incr()
            In [4]: type(incrtri)
            Out[1]: seasontri.triangle.IncrTriangle
        """
        df = _melt(_cum2incr(self), origin=self.origin, dev=self.dev, value=self.value)
        return(IncrTriangle(df, origin=self.origin, dev=self.dev, value=self.value))


    def base_cl(self, sel="all-weighted", tail=1.0):
        """
        Produce chain ladder reserve estimates based on cumulative triangle instance.

        Parameters
        ----------
        sel: str or array_like
            If ``sel`` is a string, the specified loss development patterns will be
            the associated entry from ``self.a2a_avgs``.
            If ``sel`` is array_like, values will be used in place of loss development
            factors computed from the triangle directly. For a triangle with n development
            periods, ``sel`` should be array_like with length n - 1.
            Defaults to "all-weighted".

        tail: float
            Chain ladder tail factor. Defaults to 1.0.

        Returns
        -------
        BaseChainLadderResult

        Examples
        --------
        Generate chain ladder reserve point estimates using the qtr8 dataset::

            In [1]: import seasontri
            In [2]: tri = seasontri.load("qtr8", tri_type="cum")
            In [3]: cl = tri.base_cl()

        Perform standard chain ladder, updating values for ``sel`` and ``tail``::

            In [4]: cl = tri.base_cl(sel="medial-5", tail=1.015)
        """
        return(BaseChainLadder(self).__call__(sel=sel, tail=tail))


    def plot(self, cmap="viridis", exhibit_path=None, **kwargs):
        """
        Visualize cumulative loss development by origin over a single set
        of axes.

        Parameters
        ----------
        cmap: str
            Selected matplotlib color map. For additional options, visit:
            https://matplotlib.org/stable/users/explain/colors/colormaps.html.

        exhibit_path: str
            Path to which exhibit should be written. If None, exhibit will be
            rendered via ``plt.show()``.

        kwargs: dict
            Additional plot styling options.
        """
        import matplotlib as mpl
        import matplotlib.pyplot as plt

        pltkwargs = dict(
            marker="s", markersize=5, alpha=1, linestyle="-", linewidth=1.5,
            figsize=(9, 6),
            )

        if kwargs:
            pltkwargs.update(kwargs)

        data = self.to_tbl()
        grps = data.groupby(self.origin, as_index=False)
        data_list = [grps.get_group(ii) for ii in self.origins]
        xticks = np.sort(data[self.dev].unique())

        # Get unique hex color for each unique origin period.
        fcolors = mpl.colormaps[cmap]
        colors_rgba = [fcolors(ii) for ii in np.linspace(0, 1, len(self.origins))]
        colors_hex = [mpl.colors.to_hex(ii, keep_alpha=False) for ii in colors_rgba]

        fig, ax = plt.subplots(1, 1, figsize=pltkwargs["figsize"], tight_layout=True)

        ax.set_title("Loss Development by Origin", fontsize=9, loc="left")

        for hex_color, dforg in zip(colors_hex, data_list):
            ax.plot(
                dforg[self.dev].values, dforg[self.value].values, color=hex_color,
                linewidth=pltkwargs["linewidth"], linestyle=pltkwargs["linestyle"],
                label=dforg[self.origin].values[0], marker=pltkwargs["marker"],
                markersize=pltkwargs["markersize"], alpha=pltkwargs["alpha"],
                )

        # Reduce thickness of plot outline.
        for axis in ["top", "bottom", "left", "right"]:
            ax.spines[axis].set_linewidth(0.5)

        ax.get_yaxis().set_major_formatter(mpl.ticker.FuncFormatter(lambda v, p: format(int(v), ",")))
        ax.set_xlabel("dev", fontsize=8)
        ax.set_ylim(bottom=0)
        ax.set_xticks(xticks)
        ax.tick_params(axis="x", which="major", direction="in", labelsize=8)
        ax.tick_params(axis="y", which="major", direction="in", labelsize=8)
        ax.grid(True)
        ax.legend(loc="lower right", fancybox=True, framealpha=1, fontsize="x-small")

        if exhibit_path is not None:
            plt.savefig(exhibit_path)
            plt.close(fig)
        else:
            plt.show()



def totri(data, tri_type="cum", data_format="incr", data_shape="tabular",
          origin="origin", dev="dev", value="value"):
    """
    Create a triangle object based on ``data``. ``tri_type`` can be one of
    "incr" or "cum", determining whether the resulting triangle represents
    incremental or cumulative losses/counts.
    If ``data_shape="triangle"``, ``data`` is assumed to be structured as a
    runoff triangle, indexed by origin with columns representing development
    periods. If ``data_shape="tabular"``, data is assumed to be tabular with at
    minimum columns ``origin``, ``dev`` and ``value``, which represent origin
    period, development period and metric of interest respectively.
    ``data_format`` specifies whether the metric of interest are cumulative
    or incremental in nature. Default value is "incr".

    Parameters
    ----------
    data: pd.DataFrame
        The dataset to be coerced into a triangle instance. ``data`` can be
        tabular loss data, or a dataset (pandas DataFrame) formatted as a
        triangle, but not typed as such. In the latter case,
        ``data_shape`` should be set to "triangle".

    tri_type: {"cum", "incr"}
        Either "cum" or "incr". Specifies how the measure of interest (losses,
        counts, alae, etc.) should be represented in the returned triangle
        instance.

    data_format: {"cum", "incr"}
        Specifies the representation of the metric of interest in ``data``.
        Default value is "incr".

    data_shape:{"tabular", "triangle"}
        Indicates whether ``data`` is formatted as a triangle instead of
        tabular loss data. Default value is "tabular".

    origin: str
        The field in ``data`` representing origin period. When
        ``data_shape="triangle"``, names the origin field of the returned
        triangle's tabular representation. Default value is "origin".

    dev: str
        The field in ``data`` representing development period. Default
        value is "dev".

    value: str
        The field in ``data`` representing the metric of interest (losses,
        counts, etc.). Default value is "value".

    Returns
    -------
    {seasontri.triangle.IncrTriangle, seasontri.triangle.CumTriangle}
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError("`data` must be an instance of pd.DataFrame.")

    if not tri_type.lower().strip().startswith(("i", "c")):
        raise ValueError("tri_type must be one of {{'cum', 'incr'}}, not `{}`.".format(tri_type))

    if data_shape == "triangle":

        if data_format.lower().strip().startswith("i"):
            # data is in incremental triangle format (but not typed as such).
            df = _melt(data, origin=origin, dev=dev, value=value)

        elif data_format.lower().strip().startswith("c"):
            # data is in cumulative triangle format (but not typed as such).
            df = _melt(_cum2incr(data), origin=origin, dev=dev, value=value)

        else:
            raise NameError("Invalid data_format argument: `{}`.".format(data_format))

    elif data_shape == "tabular":

        if data_format.lower().strip().startswith("c"):
            df = data.sort_values(by=[origin, dev]).rename({value: "cum"}, axis=1)
            df["incr"] = df.groupby([origin])["cum"].diff(periods=1)
            df["incr"] = np.where(np.isnan(df["incr"]), df["cum"], df["incr"])
            df = df.drop("cum", axis=1).rename({"incr": value}, axis=1)

        elif data_format.lower().strip().startswith("i"):
            df = data

        else:
            raise NameError("Invalid data_format argument: `{}`.".format(data_format))

    else:
        raise NameError("Invalid data_shape argument: `{}`.".format(data_shape))

    df = df.reset_index(drop=True)

    # Transform df to triangle instance.
    if tri_type.lower().strip().startswith("i"):
        tri = IncrTriangle(data=df, origin=origin, dev=dev, value=value)
    else:
        tri = CumTriangle(data=df, origin=origin, dev=dev, value=value)

    return(tri)
