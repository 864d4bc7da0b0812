import pandas as pd
import pytest


@pytest.fixture
def data_dir(tmp_path):
    """Daily closes for SPY (rising) and TLT (flat) in {TICKER}.csv files."""
    directory = tmp_path / "tickers"
    directory.mkdir()
    days = pd.bdate_range('2019-10-01', '2020-03-31')
    frames = {
        'SPY': [300.0 + i for i in range(len(days))],
        'TLT': [140.0] * len(days),
    }
    for ticker, closes in frames.items():
        df = pd.DataFrame({'Open': closes, 'Close': closes}, index=pd.Index(days, name='Date'))
        df.to_csv(directory / f"{ticker}.csv")
    return directory
