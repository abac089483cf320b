"""
seasontri.seasonality tests.
"""
import unittest
import warnings
import numpy as np
import pandas as pd
import seasontri
from seasontri.errors import (
    DuplicateCellError, InsufficientDataError, InvalidInputError,
    MissingRelativityError,
    )



# Observation preparation -----------------------------------------------------

class ObservationsTestCase(unittest.TestCase):
    def setUp(self):
        self.data = seasontri.load("qtr8").astype({"value": float})

    def test_fields(self):
        obs = seasontri.observations(self.data)
        self.assertEqual(obs.columns.tolist(), ["origin", "dev", "calendar", "value"])
        self.assertTrue(np.array_equal(obs.calendar.values, (obs.origin + obs.dev - 1).values))

    def test_calendar_quarter(self):
        self.assertEqual(seasontri.calendar_quarter(4), 4)
        self.assertEqual(seasontri.calendar_quarter(5), 1)
        self.assertEqual(seasontri.calendar_quarter(8), 4)
        self.assertEqual(
            seasontri.calendar_quarter(pd.Series([1, 2, 3, 4, 9])).tolist(), [1, 2, 3, 4, 1]
            )

    def test_cum_format(self):
        dfcum = seasontri.totri(self.data, tri_type="cum").to_tbl()
        dfcum = dfcum.rename({"origin": "ay", "dev": "lag", "value": "paid"}, axis=1)
        obs = seasontri.observations(dfcum, origin="ay", dev="lag", value="paid", data_format="cum")
        self.assertTrue(np.allclose(obs.value.values, self.data.value.values))

    def test_duplicates_aggregated(self):
        data = pd.concat([self.data, self.data.iloc[:1]], ignore_index=True)
        obs = seasontri.observations(data)
        self.assertEqual(obs.shape[0], 36)
        self.assertEqual(obs.value.iat[0], 200.)

    def test_negative_amount(self):
        data = self.data.copy()
        data.loc[3, "value"] = -1.
        with self.assertRaises(InvalidInputError):
            seasontri.observations(data)

    def test_non_finite_amount(self):
        for bad_value in (np.nan, np.inf):
            data = self.data.copy()
            data.loc[3, "value"] = bad_value
            with self.assertRaises(InvalidInputError):
                seasontri.observations(data)

    def test_decreasing_cumulative(self):
        dfcum = seasontri.totri(self.data, tri_type="cum").to_tbl()
        dfcum.loc[1, "value"] = 0.
        with self.assertRaises(InvalidInputError):
            seasontri.observations(dfcum, data_format="cum")

    def test_period_indices(self):
        for bad_origin in (0, 2.5):
            data = self.data.copy()
            data["origin"] = data["origin"].astype(float)
            data.loc[0, "origin"] = bad_origin
            with self.assertRaises(InvalidInputError):
                seasontri.observations(data)

    def test_to_period_index(self):
        data = self.data.copy()
        data["origin"] = data["origin"] + 2010
        data["dev"] = data["dev"] * 3
        with self.assertRaises(InvalidInputError):
            seasontri.observations(data.assign(origin=data["origin"] - 2020))
        obs = seasontri.observations(seasontri.to_period_index(data))
        self.assertTrue(np.array_equal(obs[["origin", "dev"]].values, self.data[["origin", "dev"]].values))

    def test_errors_taxonomy(self):
        self.assertTrue(issubclass(InvalidInputError, ValueError))
        self.assertTrue(issubclass(MissingRelativityError, KeyError))
        self.assertTrue(issubclass(DuplicateCellError, seasontri.SeasonalityError))



# Relativity estimation -------------------------------------------------------

class EstimateRelativitiesTestCase(unittest.TestCase):
    def setUp(self):
        self.data = seasontri.observations(seasontri.load("qtr8"))
        self.relativities = seasontri.estimate_relativities(self.data)

    def test_relativities(self):
        # Average amount per quarter is 240 / 4 = 60.
        self.assertTrue(np.allclose(
            self.relativities.values, [100. / 60., 50. / 60., 50. / 60., 40. / 60.]
            ))
        self.assertEqual(self.relativities.index.tolist(), [1, 2, 3, 4])
        self.assertEqual(self.relativities.name, "relativity")

    def test_mean_of_one(self):
        self.assertAlmostEqual(self.relativities.mean(), 1.)
        qtrauto = seasontri.observations(seasontri.load("qtrauto"))
        for complete_only in (True, False):
            relativities = seasontri.estimate_relativities(qtrauto, complete_only=complete_only)
            self.assertAlmostEqual(relativities.mean(), 1.)
            self.assertTrue((relativities > 0).all())

    def test_seasonal_shape(self):
        # Quarter 1 carries the heaviest losses in qtrauto.
        qtrauto = seasontri.observations(seasontri.load("qtrauto"))
        relativities = seasontri.estimate_relativities(qtrauto)
        self.assertEqual(relativities.idxmax(), 1)

    def test_input_unchanged(self):
        data = self.data.copy()
        seasontri.estimate_relativities(self.data)
        self.assertTrue(data.equals(self.data))

    def test_insufficient_data(self):
        # Three development periods never span a full cycle.
        data = seasontri.simulate(nbr_origins=3)
        with self.assertRaises(InsufficientDataError):
            seasontri.estimate_relativities(data)

    def test_partial_cycles(self):
        data = seasontri.simulate(nbr_origins=3)
        with self.assertRaises(InsufficientDataError):
            seasontri.estimate_relativities(data, complete_only=False)
        relativities = seasontri.estimate_relativities(
            seasontri.simulate(nbr_origins=6), complete_only=False
            )
        self.assertAlmostEqual(relativities.mean(), 1.)

    def test_zero_origin(self):
        data = self.data.copy()
        data.loc[data.origin == 1, "value"] = 0.
        with warnings.catch_warnings(record=True) as wlist:
            warnings.simplefilter("always")
            relativities = seasontri.estimate_relativities(data)
        self.assertTrue(any(issubclass(ii.category, UserWarning) for ii in wlist))
        self.assertAlmostEqual(relativities.mean(), 1.)



# Adjust / deadjust -----------------------------------------------------------

class AdjustTestCase(unittest.TestCase):
    def setUp(self):
        self.data = seasontri.observations(seasontri.load("qtrauto"))
        self.relativities = seasontri.estimate_relativities(self.data)
        self.ref_relativities = {1: 1.52, 2: .76, 3: .76, 4: .61}

    def test_reference_adjustment(self):
        obs = pd.DataFrame({"origin": [1], "dev": [1], "value": [100.]})
        adjusted = seasontri.adjust(obs, self.ref_relativities)
        self.assertEqual(adjusted.quarter.iat[0], 1)
        self.assertAlmostEqual(adjusted.value.iat[0], 65.8, places=1)

    def test_round_trip(self):
        adjusted = seasontri.adjust(self.data, self.relativities)
        restored = seasontri.deadjust(adjusted, self.relativities)
        self.assertTrue(np.allclose(restored.value.values, self.data.value.values))

    def test_order_preserving(self):
        shuffled = self.data.sample(frac=1., random_state=516)
        adjusted = seasontri.adjust(shuffled, self.relativities)
        self.assertTrue(adjusted.index.equals(shuffled.index))
        expected = shuffled.value.values / self.relativities.loc[adjusted.quarter.values].values
        self.assertTrue(np.allclose(adjusted.value.values, expected))

    def test_missing_relativity(self):
        relativities = {1: 1.52, 2: .76, 3: .76}
        with self.assertRaises(MissingRelativityError):
            seasontri.adjust(self.data, relativities)
        with self.assertRaises(KeyError):
            seasontri.deadjust(self.data, relativities)

    def test_invalid_relativity(self):
        for bad_value in (0., -1., np.nan):
            relativities = dict(self.ref_relativities)
            relativities[2] = bad_value
            with self.assertRaises(InvalidInputError):
                seasontri.adjust(self.data, relativities)



# Finalize --------------------------------------------------------------------

class FinalizeTestCase(unittest.TestCase):
    def setUp(self):
        self.data = seasontri.observations(seasontri.load("qtr8"))
        self.relativities = seasontri.estimate_relativities(self.data)
        adjusted = seasontri.adjust(self.data, self.relativities)
        self.trisqrd = seasontri.totri(adjusted, tri_type="cum").base_cl().trisqrd

    def test_completed(self):
        completed = seasontri.finalize(self.trisqrd, self.data, self.relativities)
        self.assertEqual(completed.shape[0], 64)
        self.assertFalse(completed.duplicated(subset=["origin", "dev"]).any())
        fcst = completed[completed.rectype == "forecast"]
        self.assertEqual(fcst.shape[0], 28)
        self.assertTrue((fcst.calendar > 8).all())

    def test_actuals_untouched(self):
        completed = seasontri.finalize(self.trisqrd, self.data, self.relativities)
        actuals = completed[completed.rectype == "actual"].reset_index(drop=True)
        self.assertTrue(actuals.value.equals(self.data.value))

    def test_seasonality_restored(self):
        completed = seasontri.finalize(self.trisqrd, self.data, self.relativities)
        fcst = completed[completed.rectype == "forecast"]
        amounts = fcst.quarter.map({1: 100., 2: 50., 3: 50., 4: 40.})
        self.assertTrue(np.allclose(fcst.value.values, amounts.values))

    def test_overlapping_cells(self):
        # A horizon earlier than the latest diagonal re-forecasts actual cells.
        with self.assertRaises(DuplicateCellError):
            seasontri.finalize(self.trisqrd, self.data, self.relativities, observed_horizon=6)

    def test_unreported_cell(self):
        # (7, 2) lies on the latest diagonal but has no actual record.
        data = self.data[~((self.data.origin == 7) & (self.data.dev == 2))]
        adjusted = seasontri.adjust(data, self.relativities)
        trisqrd = seasontri.totri(adjusted, tri_type="cum").base_cl().trisqrd
        completed = seasontri.finalize(trisqrd, data, self.relativities)
        self.assertEqual(completed.shape[0], 64)
        cell = completed[(completed.origin == 7) & (completed.dev == 2)]
        self.assertEqual(cell.rectype.tolist(), ["forecast"])
        self.assertAlmostEqual(cell.value.iat[0], 40.)
        self.assertAlmostEqual(completed[completed.origin == 7].value.sum(), 480.)

    def test_horizon_past_latest_diagonal(self):
        # Cells between the latest diagonal and the horizon are still forecast.
        completed = seasontri.finalize(
            self.trisqrd, self.data, self.relativities, observed_horizon=10
            )
        self.assertEqual(completed.shape[0], 64)
        self.assertFalse(completed.duplicated(subset=["origin", "dev"]).any())
        self.assertEqual((completed.rectype == "forecast").sum(), 28)

    def test_incomplete_projection(self):
        trisqrd = self.trisqrd.copy()
        trisqrd.iloc[-1, -2] = np.nan
        with self.assertRaises(InvalidInputError):
            seasontri.finalize(trisqrd, self.data, self.relativities)



if __name__ == "__main__":

    unittest.main()
