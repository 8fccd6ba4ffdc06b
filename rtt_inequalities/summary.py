import logging

import numpy as np
import pandas as pd

from rtt_inequalities import config as cfg

logger = logging.getLogger(__name__)

#Linear interpolation between order statistics (numpy/pandas default)
INTERPOLATION = 'linear'


def summarise_waits(df, by, value_col=cfg.WAIT_COL):
    """Median, quartiles and count of waiting days per group.

    Groups with no rows are left out. Quartiles use linear interpolation, so
    [5, 5, 6, 20, 21] gives Q1=5, median=6, Q3=20.
    """
    by = [by] if isinstance(by, str) else list(by)
    grouped = df.groupby(by, observed=True)[value_col]
    summary = pd.DataFrame({
        'median': grouped.median(),
        'q1': grouped.quantile(0.25, interpolation=INTERPOLATION),
        'q3': grouped.quantile(0.75, interpolation=INTERPOLATION),
        'n': grouped.size(),
    }).reset_index()
    summary = summary.loc[summary['n'] > 0].reset_index(drop=True)
    summary['n'] = summary['n'].astype('int64')
    logger.info('Summarised %s into %d groups', ', '.join(by),
                summary.shape[0])
    return summary


def summarise_imd_ethnicity(df):
    return summarise_waits(df, [cfg.IMD_COL, cfg.AGG_ETHNICITY_COL])


def format_summary_cell(row):
    return f"{row['median']:g} [{row['q1']:g}–{row['q3']:g}], n={int(row['n']):,}"


def format_summary_table(summary, index=cfg.IMD_COL,
                         columns=cfg.AGG_ETHNICITY_COL):
    """One row per ``index`` value, one column per ``columns`` value, cells
    as 'median [Q1–Q3], n=count'. Empty groups stay blank."""
    if summary.empty:
        return pd.DataFrame()
    cells = summary.assign(cell=summary.apply(format_summary_cell, axis=1))
    table = cells.pivot(index=index, columns=columns, values='cell')
    #Drop categories that never appear
    table = table.dropna(axis=0, how='all').dropna(axis=1, how='all')
    table.columns = table.columns.astype(str)
    table.columns.name = None
    return table


# =============================================================================
# % Comparison groupings
# =============================================================================
def add_age_band(df, bins=cfg.AGE_BINS, labels=cfg.AGE_LABELS):
    """Bin patient age into bands, left edge inclusive."""
    df = df.copy()
    df['age_band'] = pd.cut(df[cfg.AGE_COL], bins=list(bins),
                            labels=list(labels), right=False)
    return df


def add_imd_group(df):
    """Most deprived two deciles against the rest."""
    df = df.copy()
    imd = df[cfg.IMD_COL].astype(float)
    df['imd_group'] = np.where(imd.isin([1, 2]), 'IMD 1-2', 'IMD 3-10')
    df.loc[imd.isna(), 'imd_group'] = np.nan
    return df
