import logging

import pandas as pd

logger = logging.getLogger(__name__)

COUNT_COL = 'duplicate_count'


def find_duplicate_groups(df):
    """Report groups of rows that are identical across every column.

    Returns one row per group holding the shared values and the number of
    repetitions in ``duplicate_count``. The input table is not filtered; the
    data is synthetic, so matching rows may be coincidences rather than
    entry errors.
    """
    cols = list(df.columns)
    dupes = df.loc[df.duplicated(keep=False)]
    if dupes.empty:
        logger.info('No duplicate rows found')
        return pd.DataFrame(columns=cols + [COUNT_COL])
    #Group on plain objects so missing values and categories compare equal
    groups = (dupes.astype(object)
              .groupby(cols, dropna=False, sort=False)
              .size()
              .reset_index(name=COUNT_COL))
    logger.info('Found %d duplicate groups covering %d rows (not removed)',
                groups.shape[0], dupes.shape[0])
    return groups
