"""
This module contains the class definition of ``SeasonalChainLadder``, which
projects quarterly loss development after neutralizing calendar-quarter
seasonality. The age-to-age factors of a quarterly triangle are distorted
whenever development periods straddle heavy and light calendar quarters;
projecting seasonality-neutral amounts and restoring the seasonal pattern
afterwards removes that distortion.
"""
import logging
import warnings
import numpy as np
import pandas as pd
from .base import BaseChainLadder
from .. import seasonality
from ..triangle import totri

logger = logging.getLogger(__name__)



class SeasonalChainLadder:
    """
    Seasonality-adjusted chain ladder. The estimator:

    1. Estimates relativity factors by calendar quarter.
    2. Divides each observation by its quarter's relativity.
    3. Projects the adjusted cumulative triangle with ``BaseChainLadder``.
    4. Multiplies projected cells by their quarter's relativity and merges
       them with the actual observations.

    The unadjusted ("naive") chain ladder is run alongside for comparison.

    Parameters
    ----------
    data: pd.DataFrame
        Tabular loss data with 1-based integer origin and development
        period indices.

    origin: str
        The fieldname in ``data`` representing origin period.

    dev: str
        The fieldname in ``data`` representing development period.

    value: str
        The fieldname in ``data`` representing loss amounts.

    data_format: {"incr", "cum"}
        Whether amounts in ``data`` are incremental or cumulative. Default
        value is "incr".

    Examples
    --------
    ::

        In [1]: import seasontri
        In [2]: scl = seasontri.SeasonalChainLadder(seasontri.simulate())
        In [3]: result = scl()
        In [4]: result.summary["ultimate"]
    """
    def __init__(self, data, origin="origin", dev="dev", value="value", data_format="incr"):
        self.data = seasonality.observations(
            data, origin=origin, dev=dev, value=value, data_format=data_format
            )


    def __call__(self, sel="all-weighted", nbr_quarters=4, complete_only=True,
                 observed_horizon=None):
        """
        Run the seasonality-adjusted projection.

        Parameters
        ----------
        sel: str or array_like
            Loss development factor selection passed to ``BaseChainLadder``
            for both the adjusted and the naive projection. Defaults to
            "all-weighted".

        nbr_quarters: int
            Number of calendar quarters per seasonal cycle. Defaults to 4.

        complete_only: bool
            Estimate relativities from complete seasonal cycles only.
            Defaults to True.

        observed_horizon: int
            Last observed calendar period. Defaults to the latest calendar
            period in the data.

        Returns
        -------
        SeasonalChainLadderResult
        """
        relativities = seasonality.estimate_relativities(
            self.data, nbr_quarters=nbr_quarters, complete_only=complete_only
            )
        adjusted = seasonality.adjust(self.data, relativities, nbr_quarters=nbr_quarters)
        adjusted_cl = BaseChainLadder(totri(adjusted, tri_type="cum"))(sel=sel, tail=1.0)
        completed = seasonality.finalize(
            adjusted_cl.trisqrd, self.data, relativities,
            observed_horizon=observed_horizon, nbr_quarters=nbr_quarters
            )
        naive_cl = BaseChainLadder(totri(self.data, tri_type="cum"))(sel=sel, tail=1.0)
        logger.debug("Projected %d forecast cells", int((completed["rectype"] == "forecast").sum()))

        return(SeasonalChainLadderResult(
            summary=self._summary(completed, naive_cl), completed=completed,
            relativities=relativities, adjusted=adjusted, adjusted_cl=adjusted_cl,
            naive_cl=naive_cl, sel=sel,
            ))


    @staticmethod
    def _summary(completed, naive_cl):
        """
        Compile latest, ultimate and reserve by origin for the seasonality
        adjusted projection, alongside the naive chain ladder ultimate and
        reserve.

        Parameters
        ----------
        completed: pd.DataFrame
            Actual and forecast incremental cells.

        naive_cl: BaseChainLadderResult
            Chain ladder result based on unadjusted observations.

        Returns
        -------
        pd.DataFrame
        """
        actuals = completed[completed["rectype"] == "actual"]
        latest = actuals.groupby("origin")["value"].sum().rename("latest")
        ultimates = completed.groupby("origin")["value"].sum().rename("ultimate")
        naive_ultimates = naive_cl.ultimates.drop("total").astype(float)
        dfsumm = pd.DataFrame({
            "latest": latest,
            "ultimate": ultimates,
            "reserve": ultimates - latest,
            "naive_ultimate": naive_ultimates.values,
            }, index=latest.index)
        dfsumm["naive_reserve"] = dfsumm["naive_ultimate"] - dfsumm["latest"]
        dfsumm.index.name = None
        dfsumm.loc["total"] = dfsumm.sum()
        return(dfsumm)



class SeasonalChainLadderResult:
    """
    Container object for SeasonalChainLadder output.

    Parameters
    ----------
    summary: pd.DataFrame
        Latest, ultimate and reserve by origin, seasonality adjusted and
        naive, with a total row.

    completed: pd.DataFrame
        Actual and forecast incremental cells in tabular form, with
        ``rectype`` identifying the provenance of each cell.

    relativities: pd.Series
        Relativity factors by calendar quarter.

    adjusted: pd.DataFrame
        Seasonality-neutral observations.

    adjusted_cl: BaseChainLadderResult
        Chain ladder result based on the adjusted observations.

    naive_cl: BaseChainLadderResult
        Chain ladder result based on the unadjusted observations.

    sel: str or array_like
        Loss development factor selection.
    """
    def __init__(self, summary, completed, relativities, adjusted, adjusted_cl, naive_cl, sel):

        self.naive_ultimates = summary["naive_ultimate"]
        self.ultimates = summary["ultimate"]
        self.reserves = summary["reserve"]
        self.latest = summary["latest"]
        self.relativities = relativities
        self.adjusted_cl = adjusted_cl
        self.completed = completed
        self.adjusted = adjusted
        self.naive_cl = naive_cl
        self.summary = summary
        self.sel = sel

        self._summspecs = {
            "latest": "{:,.2f}".format, "ultimate": "{:,.2f}".format,
            "reserve": "{:,.2f}".format, "naive_ultimate": "{:,.2f}".format,
            "naive_reserve": "{:,.2f}".format,
            }


    def to_tri(self, tri_type="cum"):
        """
        Return the completed triangle, actuals and forecasts combined.

        Parameters
        ----------
        tri_type: {"cum", "incr"}
            Representation of the returned triangle. Defaults to "cum".

        Returns
        -------
        {seasontri.triangle.IncrTriangle, seasontri.triangle.CumTriangle}
        """
        return(totri(self.completed, tri_type=tri_type))


    def _data_transform(self):
        """
        Transform completed cells into cumulative losses by origin for use
        in the FacetGrid exhibit. The latest actual value of each origin
        appears in both the actual and forecast series so that projected
        development connects to the observed history.

        Returns
        -------
        pd.DataFrame
        """
        df = self.completed.sort_values(by=["origin", "dev"]).reset_index(drop=True)
        df["loss"] = df.groupby("origin")["value"].cumsum()
        dfact = df[df["rectype"] == "actual"]
        dflast = dfact.groupby("origin").tail(1).assign(rectype="forecast")
        dfpred = pd.concat([dflast, df[df["rectype"] == "forecast"]])
        dfall = pd.concat([dfact, dfpred]).sort_values(by=["origin", "rectype", "dev"])
        return(dfall[["origin", "dev", "loss", "rectype"]].reset_index(drop=True))


    def plot(self, actuals_color="#334488", forecasts_color="#FFFFFF", axes_style="darkgrid",
             context="notebook", col_wrap=4, hue_kws=None, exhibit_path=None, **kwargs):
        """
        Visualize actual losses along with the seasonality-adjusted
        projection, faceted by origin.

        Parameters
        ----------
        actuals_color: str
            A color name or hexidecimal code used to represent actual
            observations. Defaults to "#334488".

        forecasts_color: str
            A color name or hexidecimal code used to represent forecast
            observations. Defaults to "#FFFFFF".

        axes_style: str
            Aesthetic style of plots. Defaults to "darkgrid". Other options
            include: {whitegrid, dark, white, ticks}.

        context: str
            Set the plotting context parameters. Defaults to "notebook".
            Additional options include {"paper", "talk", "poster"}.

        col_wrap: int
            The maximum number of origin period axes to have on a single row
            of the resulting FacetGrid. Defaults to 4.

        hue_kws: dictionary of param:list of values mapping
            Other keyword arguments to insert into the plotting call. Each
            list of values should have length 2, representing aesthetic
            overrides for forecasts and actuals respectively. Defaults to
            ``None``.

        exhibit_path: str
            Path to which exhibit should be written. If None, exhibit will be
            rendered via ``plt.show()``.

        kwargs: dict
            Additional styling options passed to ``plt.plot``.
        """
        import matplotlib.pyplot as plt
        import seaborn as sns
        sns.set_context(context)

        data = self._data_transform()

        with sns.axes_style(axes_style):

            huekwargs = dict(
                marker=["o", "o"], markersize=[6, 6],
                color=["#000000", "#000000"], fillstyle=["full", "full"],
                markerfacecolor=[forecasts_color, actuals_color],
                markeredgecolor=["#000000", "#000000"],
                markeredgewidth=[.50, .50], linestyle=["-", "-"],
                linewidth=[.475, .475],
                )

            if hue_kws is not None:
                if all(len(hue_kws[ii]) == 2 for ii in hue_kws):
                    huekwargs.update(hue_kws)
                else:
                    warnings.warn("hue_kws overrides not correct length - Ignoring.")

            grid = sns.FacetGrid(
                data, col="origin", hue="rectype", hue_kws=huekwargs,
                col_wrap=col_wrap, margin_titles=False, despine=True, sharex=True,
                sharey=False, hue_order=["forecast", "actual"],
                )

            grid.map(plt.plot, "dev", "loss", **kwargs)
            grid.set_axis_labels("", "")
            grid.set_titles("{col_name}", size=9)
            grid.set(xticks=np.sort(data["dev"].unique()))
            grid.add_legend()

            for ax_ii in grid.axes.flat:
                # Draw border around each facet.
                for _, spine in ax_ii.spines.items():
                    spine.set(visible=True, color="#000000", linewidth=.50)

            if exhibit_path is not None:
                grid.savefig(exhibit_path)
                plt.close(grid.figure)
            else:
                plt.show()


    def __str__(self):
        return(self.summary.to_string(formatters=self._summspecs))


    def __repr__(self):
        return(self.summary.to_string(formatters=self._summspecs))
