"""
seasontri.estimators.seasonal and seasontri.utils tests.
"""
import os
import os.path
import tempfile
import unittest
import matplotlib
matplotlib.use("Agg")
import numpy as np
import seasontri



# SeasonalChainLadder ---------------------------------------------------------

class SeasonalChainLadderTestCase(unittest.TestCase):
    def setUp(self):
        self.data = seasontri.load("qtr8")
        self.r_scl = seasontri.SeasonalChainLadder(self.data)()

    def test_ultimates(self):
        # Every origin spans two full seasonal cycles: 2 * (100 + 50 + 50 + 40).
        ultimates = self.r_scl.ultimates.drop("total").values
        self.assertTrue(np.allclose(ultimates, 480.))
        self.assertAlmostEqual(self.r_scl.summary.loc["total", "ultimate"], 3840.)

    def test_naive_ultimates(self):
        naive = self.r_scl.naive_ultimates.drop("total").values
        self.assertFalse(np.allclose(naive, 480.))
        self.assertAlmostEqual(naive[0], 480.)

    def test_reserves(self):
        summ = self.r_scl.summary.drop("total")
        self.assertTrue(np.allclose(summ["reserve"].values, (summ["ultimate"] - summ["latest"]).values))
        self.assertAlmostEqual(self.r_scl.reserves.loc["total"], 3840. - 1980.)
        self.assertAlmostEqual(self.r_scl.reserves.loc[1], 0.)

    def test_latest(self):
        latest = self.data.groupby("origin")["value"].sum()
        self.assertTrue(np.allclose(self.r_scl.latest.drop("total").values, latest.values))

    def test_completed(self):
        completed = self.r_scl.completed
        self.assertEqual(completed.shape[0], 64)
        self.assertFalse(completed.duplicated(subset=["origin", "dev"]).any())
        self.assertEqual(set(completed.rectype.unique()), {"actual", "forecast"})

    def test_adjusted_flat(self):
        # Seasonality-neutral amounts are constant for this dataset.
        self.assertTrue(np.allclose(self.r_scl.adjusted.value.values, 60.))
        self.assertTrue(np.allclose(self.r_scl.adjusted_cl.ldfs.values[:-1], [
            2., 1.5, 4. / 3., 1.25, 1.2, 7. / 6., 8. / 7.,
            ]))

    def test_to_tri(self):
        cumtri = self.r_scl.to_tri()
        self.assertTrue(isinstance(cumtri, seasontri.triangle.CumTriangle))
        self.assertFalse(cumtri.isna().any().any())
        self.assertTrue(np.allclose(cumtri[8].values, 480.))
        incrtri = self.r_scl.to_tri(tri_type="incr")
        self.assertTrue(isinstance(incrtri, seasontri.triangle.IncrTriangle))

    def test_matches_simulated_square(self):
        square = seasontri.simulate(train_only=False)
        completed = self.r_scl.completed.sort_values(["origin", "dev"])
        self.assertTrue(np.allclose(completed.value.values, square.value.values))

    def test_cum_input(self):
        dfcum = seasontri.totri(self.data, tri_type="cum").to_tbl()
        dfcum = dfcum.rename({"origin": "ay", "dev": "lag", "value": "paid"}, axis=1)
        scl = seasontri.SeasonalChainLadder(
            dfcum, origin="ay", dev="lag", value="paid", data_format="cum"
            )
        r_scl = scl()
        self.assertTrue(np.allclose(r_scl.ultimates.drop("total").values, 480.))

    def test_unreported_cell(self):
        data = self.data[~((self.data.origin == 7) & (self.data.dev == 2))]
        r_scl = seasontri.SeasonalChainLadder(data)()
        self.assertEqual(r_scl.completed.shape[0], 64)
        self.assertTrue(np.allclose(r_scl.ultimates.drop("total").values, 480.))
        self.assertFalse(r_scl.to_tri().isna().any().any())

    def test_str(self):
        strout = str(self.r_scl)
        self.assertTrue("naive_ultimate" in strout)
        self.assertTrue("total" in strout)

    def test_plot(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            exhibit_path = os.path.join(tmpdir, "seasonal.png")
            self.r_scl.plot(exhibit_path=exhibit_path)
            self.assertTrue(os.path.isfile(exhibit_path))

    def test_data_transform(self):
        dfplot = self.r_scl._data_transform()
        self.assertEqual(dfplot.columns.tolist(), ["origin", "dev", "loss", "rectype"])
        # Each origin repeats its latest actual in the forecast series.
        self.assertEqual(dfplot.shape[0], 64 + 8)



class SeasonalChainLadderQtrAutoTestCase(unittest.TestCase):
    def setUp(self):
        self.r_scl = seasontri.SeasonalChainLadder(seasontri.load("qtrauto"))()

    def test_relativities(self):
        self.assertAlmostEqual(self.r_scl.relativities.mean(), 1.)
        self.assertEqual(self.r_scl.relativities.idxmax(), 1)

    def test_reserves(self):
        self.assertTrue((self.r_scl.reserves.drop("total") >= 0).all())

    def test_completed(self):
        completed = self.r_scl.completed
        self.assertEqual(completed.shape[0], 144)
        self.assertFalse(completed.duplicated(subset=["origin", "dev"]).any())

    def test_selection(self):
        r_scl = seasontri.SeasonalChainLadder(seasontri.load("qtrauto"))(sel="simple-4")
        self.assertEqual(r_scl.sel, "simple-4")
        self.assertEqual(r_scl.completed.shape[0], 144)



# Utilities -------------------------------------------------------------------

class UtilsTestCase(unittest.TestCase):
    def test_get_datasets(self):
        self.assertEqual(seasontri.get_datasets(), ["qtr8", "qtrauto"])

    def test_load(self):
        self.assertEqual(seasontri.load("qtr8").value.sum(), 1980)
        self.assertEqual(seasontri.load("qtrauto").value.sum(), 10682)
        self.assertTrue(isinstance(seasontri.load("qtr8", tri_type="cum"), seasontri.triangle.CumTriangle))
        self.assertTrue(isinstance(seasontri.load("qtr8", tri_type="incr"), seasontri.triangle.IncrTriangle))

    def test_load_invalid(self):
        with self.assertRaises(KeyError):
            seasontri.load("raa")
        with self.assertRaises(ValueError):
            seasontri.load("qtr8", tri_type="square")

    def test_simulate(self):
        sim = seasontri.simulate()
        ref = seasontri.load("qtr8")
        self.assertTrue(np.array_equal(sim[["origin", "dev"]].values, ref[["origin", "dev"]].values))
        self.assertTrue(np.allclose(sim.value.values, ref.value.values))

    def test_simulate_square(self):
        square = seasontri.simulate(train_only=False)
        self.assertEqual(square.shape[0], 64)
        self.assertTrue(np.allclose(square.groupby("origin")["value"].sum().values, 480.))

    def test_simulate_amounts(self):
        with self.assertRaises(ValueError):
            seasontri.simulate(amounts={1: 100., 2: 50., 3: 50.})
        sim = seasontri.simulate(nbr_origins=4, amounts={1: 1., 2: 2.}, nbr_quarters=2)
        self.assertEqual(sim.shape[0], 10)
        self.assertEqual(sim.value.tolist()[:4], [1., 2., 1., 2.])



if __name__ == "__main__":

    unittest.main()
