import logging
import numbers
from dataclasses import dataclass

import pandas as pd

from rtt_inequalities import config as cfg
from rtt_inequalities.errors import DateParseError

logger = logging.getLogger(__name__)

#Day 0 for Excel serial dates (allows for the 1900 leap year bug)
EXCEL_EPOCH = '1899-12-30'


@dataclass(frozen=True)
class CleaningReport:
    rows_in: int
    missing_removed: int
    out_of_range_removed: int
    rows_out: int


def drop_missing(df, columns=cfg.CORE_COLUMNS):
    """Remove rows missing a value in any of ``columns``.

    Returns the filtered copy and the number of rows removed.
    """
    kept = df.dropna(subset=list(columns)).copy()
    removed = df.shape[0] - kept.shape[0]
    logger.info('Removed %d rows with missing values', removed)
    return kept, removed


def _is_serial(value):
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _parse_dates(series, dayfirst=False):
    #Excel stores some dates as serial day numbers
    serial = series.map(_is_serial).astype(bool) & series.notna()
    parsed = pd.Series(pd.NaT, index=series.index, dtype='datetime64[ns]')
    if serial.any():
        parsed[serial] = pd.to_datetime(series[serial].astype(float), unit='D',
                                        origin=EXCEL_EPOCH, errors='coerce')
    text = ~serial & series.notna()
    if text.any():
        parsed[text] = pd.to_datetime(series[text], errors='coerce',
                                      format='mixed', dayfirst=dayfirst)
    bad = series.notna() & parsed.isna()
    if bad.any():
        row = bad.idxmax()
        raise DateParseError(
            f'Could not parse {series.name} {series[row]!r} (row {row})',
            value=series[row])
    return parsed


def add_waiting_days(df, start_col=cfg.START_DATE_COL,
                     seen_col=cfg.SEEN_DATE_COL, dayfirst=False):
    """Add ``waiting_days``: calendar days from wait start to seen date.

    Times of day are ignored, so a patient seen the morning after an
    afternoon referral has waited one day.
    """
    df = df.copy()
    df[start_col] = _parse_dates(df[start_col], dayfirst=dayfirst)
    df[seen_col] = _parse_dates(df[seen_col], dayfirst=dayfirst)
    df[cfg.WAIT_COL] = (df[seen_col].dt.normalize()
                        - df[start_col].dt.normalize()).dt.days
    #Whole days once both dates are present
    if df[cfg.WAIT_COL].notna().all():
        df[cfg.WAIT_COL] = df[cfg.WAIT_COL].astype('int64')
    return df


def filter_waiting_days(df, min_waiting_days=cfg.MIN_WAITING_DAYS,
                        max_waiting_days=cfg.MAX_WAITING_DAYS):
    """Keep rows with min_waiting_days <= waiting_days < max_waiting_days.

    Negative waits are referral dates keyed with the wrong year or month;
    very long waits are old referrals outside the analysis window.
    """
    in_range = ((df[cfg.WAIT_COL] >= min_waiting_days)
                & (df[cfg.WAIT_COL] < max_waiting_days))
    kept = df.loc[in_range].copy()
    removed = df.shape[0] - kept.shape[0]
    logger.info('Removed %d rows with waiting days outside [%d, %d)',
                removed, min_waiting_days, max_waiting_days)
    return kept, removed


def clean_rtt_data(df, config=None):
    """Drop missing rows, derive waiting days, then range filter.

    The order matters: waiting days are only computed once both dates are
    known to be present.
    """
    config = config or cfg.PipelineConfig()
    rows_in = df.shape[0]
    df, missing_removed = drop_missing(df)
    df = add_waiting_days(df, dayfirst=config.dayfirst)
    df, out_of_range_removed = filter_waiting_days(
        df, config.min_waiting_days, config.max_waiting_days)
    report = CleaningReport(rows_in=rows_in,
                            missing_removed=missing_removed,
                            out_of_range_removed=out_of_range_removed,
                            rows_out=df.shape[0])
    logger.info('Cleaning kept %s of %s rows', f'{report.rows_out:,.0f}',
                f'{rows_in:,.0f}')
    return df, report
