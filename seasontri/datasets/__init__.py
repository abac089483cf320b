"""
seasontri sample datasets. All datasets are quarterly, with 1-based origin
and development period indices and incremental loss amounts:

    - qtr8: Synthetic 8-quarter triangle in which each incremental amount
      depends only on calendar quarter (100 in quarter 1, 50 in quarters
      2 and 3, 40 in quarter 4).

    - qtrauto: 12-quarter triangle combining a development pattern with a
      calendar-quarter seasonal effect and modest growth in exposure.
"""
from pathlib import Path

datasets_dir = Path(__file__).parent

dataref = {
    "qtr8": str(datasets_dir.joinpath("qtr8.csv")),
    "qtrauto": str(datasets_dir.joinpath("qtrauto.csv")),
    }
