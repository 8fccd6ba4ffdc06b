import logging
import re
import zipfile
from pathlib import Path

import pandas as pd

from rtt_inequalities import config as cfg
from rtt_inequalities.errors import LoadError, SchemaError

logger = logging.getLogger(__name__)

IMD_DTYPE = pd.CategoricalDtype(categories=list(cfg.IMD_DECILES), ordered=True)


def normalise_column_names(columns):
    """Lower case, with runs of spaces/punctuation collapsed to underscores.

    'Index of Multiple Deprivation ' -> 'index_of_multiple_deprivation'
    """
    return [re.sub(r'[^0-9a-z]+', '_', str(c).strip().lower()).strip('_')
            for c in columns]


def load_rtt_data(path, sheet_name=cfg.SHEET_NAME,
                  missing_tokens=cfg.MISSING_TOKENS):
    """Read one sheet of the RTT spreadsheet and coerce the core columns.

    Only ``missing_tokens`` (and empty cells) are read as missing, so labels
    such as 'None' survive as values.
    """
    path = Path(path)
    if not path.is_file():
        raise LoadError(f'RTT data file not found: {path}', value=str(path))
    logger.info('Reading in data from %s (sheet %r)...', path, sheet_name)
    try:
        df = pd.read_excel(path, sheet_name=sheet_name,
                           na_values=sorted(set(missing_tokens) | {''}),
                           keep_default_na=False)
    except ValueError as e:
        #pandas reports a missing worksheet as a ValueError
        raise LoadError(f'Could not read sheet {sheet_name!r} from {path}: {e}',
                        value=sheet_name) from e
    except (OSError, zipfile.BadZipFile) as e:
        raise LoadError(f'Could not read {path}: {e}', value=str(path)) from e

    df.columns = normalise_column_names(df.columns)
    missing = [c for c in cfg.CORE_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(f'Missing expected columns: {", ".join(missing)}',
                          value=missing)
    logger.info('Read %s rows', f'{df.shape[0]:,.0f}')
    return coerce_types(df)


def coerce_types(df):
    """Cast IMD to an ordered categorical, ethnicity to a categorical and age
    to a number. Returns a new table."""
    df = df.copy()
    #IMD decile, ranked 1-10
    raw_imd = df[cfg.IMD_COL]
    if isinstance(raw_imd.dtype, pd.CategoricalDtype):
        raw_imd = raw_imd.astype(object)
    imd = pd.to_numeric(raw_imd, errors='coerce')
    bad_imd = raw_imd.notna() & ~imd.isin(cfg.IMD_DECILES)
    if bad_imd.any():
        bad = raw_imd[bad_imd].unique().tolist()
        raise SchemaError(f'IMD values outside 1-10: {bad}', value=bad)
    df[cfg.IMD_COL] = imd.astype('Int64').astype(IMD_DTYPE)

    #Age must be a whole, non-negative number where present
    age = pd.to_numeric(df[cfg.AGE_COL], errors='coerce')
    bad_age = df[cfg.AGE_COL].notna() & (age.isna() | (age < 0)
                                         | (age % 1 != 0))
    if bad_age.any():
        bad = df.loc[bad_age, cfg.AGE_COL].unique().tolist()
        raise SchemaError(f'Invalid patient ages: {bad}', value=bad)
    df[cfg.AGE_COL] = age

    #Strip stray whitespace from labels before building the categories
    eth = df[cfg.ETHNICITY_COL]
    df[cfg.ETHNICITY_COL] = eth.where(eth.isna(),
                                      eth.astype(str).str.strip()
                                      ).astype('category')
    return df
