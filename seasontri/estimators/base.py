"""
This module contains the class definition of ``BaseChainLadder``.
"""
from collections.abc import Sequence
import pandas as pd
import numpy as np



class BaseChainLadder:
    """
    From the Casualty Actuarial Society's *Estimating Unpaid Claims Using
    Basic Techniques* Version 3 (Friedland, Jacqueline - 2010), the
    development method ('Chain Ladder') consists of seven basic steps:

    1. Compile claims data in a development triangle.
    2. Calculate age-to-age factors.
    3. Calculate averages of the age-to-age factors.
    4. Select claim development factors.
    5. Select tail factor.
    6. Calculate cumulative claims.
    7. Project ultimate claims.

    The BaseChainLadder class encapsulates logic to perform steps 1-7.

    Parameters
    ----------
    cumtri: seasontri.triangle.CumTriangle
        A cumulative triangle instance.

    References
    ----------
    1. Friedland, J., *Estimating Unpaid Claims Using Basic Techniques*,
       Casualty Actuarial Society, 2010.
    """
    def __init__(self, cumtri):
        """
        Generate point estimates for outstanding claim liabilities at
        ultimate for each origin period and in aggregate. The
        BaseChainLadder class exposes no functionality to estimate
        variability around the point estimates at ultimate.

        Parameters
        ----------
        cumtri: seasontri.triangle.CumTriangle
            A cumulative triangle instance.
        """
        self.tri = cumtri


    def __call__(self, sel="all-weighted", tail=1.0):
        """
        Compile a summary of ultimate and reserve estimates resulting from
        the application of the development technique. Returned object is an
        instance of ``BaseChainLadderResult``, which exposes a ``summary``
        attribute, a DataFrame with the following fields:

            * index: Origin period.

            * maturity: The age of the associated origin period in terms of
              development period duration.

            * cldf: Cumulative loss development factors.

            * emergence: 1 / cldf.

            * latest: The latest diagonal from the cumulative triangle instance.

            * ultimate: Projected ultimates. Computed as latest * cldf.

            * reserve: Chain ladder reserve estimates. Computed as
              ultimate - latest.

        Parameters
        ----------
        sel: str or array_like
            If ``sel`` is a string, the specified loss development patterns will be
            the associated entry from ``self.tri.a2a_avgs``.
            If ``sel`` is array_like, values will be used in place of loss development
            factors computed from the triangle directly. For a triangle with n development
            periods, ``sel`` should be array_like with length n - 1.
            Defaults to "all-weighted".

        tail: float
            Tail factor. Defaults to 1.0.

        Returns
        -------
        BaseChainLadderResult
        """
        if isinstance(sel, str):
            ldfs = self._ldfs(sel=sel, tail=tail)

        elif isinstance(sel, (Sequence, np.ndarray, pd.Series)):
            sel_ = np.asarray(sel, dtype=float)
            if sel_.size != (self.tri.devp.size - 1):
                raise ValueError(
                    "sel has {} values, LDF overrides require {}.".format(
                        sel_.size, self.tri.devp.size - 1
                        )
                    )
            # Append sel with tail.
            ldfs = pd.Series(np.append(sel_, tail), index=self.tri.devp.values, name="ldf")

        else:
            raise TypeError("sel must be a string or array_like, not `{}`.".format(type(sel)))

        cldfs = self._cldfs(ldfs=ldfs)
        ultimates = self._ultimates(cldfs=cldfs)
        reserves = self._reserves(ultimates=ultimates)
        latest = self.tri.latest_by_origin
        maturity = self.tri.maturity
        trisqrd = self._trisqrd(ldfs=ldfs)

        # Compile chain ladder point estimate summary.
        dfsumm = pd.DataFrame({
            "maturity": maturity.astype(str).values,
            "cldf": cldfs.loc[maturity.values].values,
            "latest": latest.values,
            "ultimate": ultimates.values,
            "reserve": reserves.values,
            }, index=self.tri.index)
        dfsumm.insert(2, "emergence", 1 / dfsumm["cldf"])
        dfsumm.index.name = None
        dfsumm = dfsumm.astype({"maturity": object})
        dfsumm.loc["total"] = [
            "", np.nan, np.nan, latest.sum(), ultimates.sum(), reserves.sum(),
            ]

        cl_result = BaseChainLadderResult(
            summary=dfsumm, tri=self.tri, sel=sel, ldfs=ldfs, tail=tail, trisqrd=trisqrd
            )

        return(cl_result)


    def _ldfs(self, sel="all-weighted", tail=1.0):
        """
        Lookup loss development factors corresponding to ``sel``.

        Parameters
        ----------
        sel: str
            The ldf average to select from ``triangle.CumTriangle.a2a_avgs``.
            Defaults to "all-weighted".

        tail: float
            Tail factor. Defaults to 1.0.

        Returns
        -------
        pd.Series
        """
        a2a_avgs = self.tri.a2a_avgs()
        if sel not in a2a_avgs.index:
            raise ValueError("`{}` is not a valid ldf selection.".format(sel))
        ldfs = a2a_avgs.loc[sel].astype(float).tolist() + [tail]
        return(pd.Series(ldfs, index=self.tri.devp.values, name="ldf"))


    def _cldfs(self, ldfs):
        """
        Calculate cumulative loss development factors by successive
        multiplication beginning with the tail factor and the oldest
        age-to-age factor. The cumulative claim development factor projects
        the total growth over the remaining valuations. Cumulative claim
        development factors are also known as "Age-to-Ultimate Factors"
        or "Claim Development Factors to Ultimate".

        Parameters
        ----------
        ldfs: pd.Series
            Selected ldfs, typically the output of calling ``self._ldfs``.

        Returns
        -------
        pd.Series
        """
        cldfs = np.cumprod(ldfs.values[::-1])[::-1]
        cldfs = pd.Series(data=cldfs, index=ldfs.index.values, name="cldf")
        return(cldfs.astype(float).sort_index())


    def _ultimates(self, cldfs):
        """
        Ultimate claims are equal to the product of the latest valuation of
        losses (the amount along latest diagonal of any ``CumTriangle``
        instance) and the appropriate cldf/age-to-ultimate factor. We
        determine the appropriate age-to-ultimate factor based on the
        maturity of each origin period.

        Parameters
        ----------
        cldfs: pd.Series
            Cumulative loss development factors, conventionally obtained
            via BaseChainLadder's ``_cldfs`` method.

        Returns
        -------
        pd.Series
        """
        ultimates = pd.Series(
            data=self.tri.latest_by_origin.values * cldfs.loc[self.tri.maturity.values].values,
            index=self.tri.index, name="ultimate"
            )
        return(ultimates.astype(float).sort_index())


    def _reserves(self, ultimates):
        """
        Return IBNR/reserve estimates by origin and in aggregate. Represents
        the difference between ultimate projections for each origin period
        and the latest cumulative value.

        Parameters
        ----------
        ultimates: pd.Series
            Estimated ultimate losses, conventionally obtained from
            BaseChainLadder's ``_ultimates`` method.

        Returns
        -------
        pd.Series
        """
        reserves = pd.Series(
            data=ultimates.values - self.tri.latest_by_origin.values,
            index=self.tri.index, name="reserve")
        return(reserves.astype(float).sort_index())


    def _trisqrd(self, ldfs):
        """
        Project claims growth for each future development period. Returns a
        DataFrame of loss projections for each subsequent development period
        for each origin period. Populates the triangle's lower-right or
        southeast portion (i.e., the result of "squaring the triangle").
        Observed cells are carried over untouched.

        Parameters
        ----------
        ldfs: pd.Series
            Selected ldfs, typically the output of calling ``self._ldfs``.

        Returns
        -------
        pd.DataFrame
        """
        trisqrd = pd.DataFrame(self.tri, copy=True)
        for ii, devp in enumerate(trisqrd.columns[1:], start=1):
            # Cells beyond each origin's latest valid development period.
            fcst = (self.tri.rlvi["col_offset"] < ii).values
            trisqrd.loc[fcst, devp] = trisqrd.loc[fcst, trisqrd.columns[ii - 1]] * ldfs.values[ii - 1]
        # Multiply right-most column by tail factor.
        max_devp = trisqrd.columns[-1]
        trisqrd["ultimate"] = trisqrd.loc[:, max_devp].values * ldfs.values[-1]
        return(trisqrd.astype(float).sort_index())



class BaseChainLadderResult:
    """
    Container object for BaseChainLadder output.

    Parameters
    ----------
    summary: pd.DataFrame
        Chain Ladder summary compilation.

    tri: seasontri.triangle.CumTriangle
        A cumulative triangle instance.

    sel: str or array_like
        Reference to loss development selection. If ldf overrides are
        utilized, ``sel`` will be identical to ``ldfs``.

    ldfs: pd.Series
        Loss development factors.

    tail: float
        Tail factor. Defaults to 1.0.

    trisqrd: pd.DataFrame
        Projected claims growth for each future development period.
    """
    def __init__(self, summary, tri, sel, ldfs, tail, trisqrd):

        self.emergence = summary["emergence"]
        self.ultimates = summary["ultimate"]
        self.maturity = summary["maturity"]
        self.reserves = summary["reserve"]
        self.latest = summary["latest"]
        self.cldfs = summary["cldf"]
        self.summary = summary
        self.trisqrd = trisqrd
        self.ldfs = ldfs
        self.tail = tail
        self.sel = sel
        self.tri = tri

        self._summspecs = {
            "ultimate": "{:,.0f}".format, "reserve": "{:,.0f}".format,
            "latest": "{:,.0f}".format, "cldf": "{:.5f}".format,
            "emergence": "{:.5f}".format,
            }


    def __str__(self):
        return(self.summary.to_string(formatters=self._summspecs, na_rep=""))


    def __repr__(self):
        return(self.summary.to_string(formatters=self._summspecs, na_rep=""))
