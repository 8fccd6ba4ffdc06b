import matplotlib
matplotlib.use('Agg')

import pandas as pd
import pytest

from rtt_inequalities.ethnicity import load_ethnicity_mapping
from rtt_inequalities.loader import coerce_types

COLUMNS = ['patient_age', 'index_of_multiple_deprivation', 'ethnicity',
           'wait_start_date', 'seen_date']

ROWS = [
    #8 day wait, kept
    (34, 3, 'Unwilling to answer', '2022-01-02', '2022-01-10'),
    #Referral after treatment, dropped
    (50, 5, 'White British', '2022-03-01', '2022-01-10'),
    #Referral from 2010, dropped
    (70, 1, 'Indian', '2010-06-01', '2022-01-10'),
    #Identical pair, both kept
    (41, 2, 'Black African', '2022-02-01', '2022-03-01'),
    (41, 2, 'Black African', '2022-02-01', '2022-03-01'),
    #Missing values, dropped
    (20, None, 'White Irish', '2022-01-05', '2022-02-05'),
    (63, 7, None, '2022-01-05', '2022-02-05'),
    #56 day wait, kept
    (8, 10, 'White and Asian', '2021-11-15', '2022-01-10'),
]


@pytest.fixture
def raw_rtt():
    return coerce_types(pd.DataFrame(ROWS, columns=COLUMNS))


@pytest.fixture(scope='session')
def mapping():
    return load_ethnicity_mapping()


@pytest.fixture
def rtt_xlsx(tmp_path):
    """Spreadsheet with untidy headers and NULL/NA tokens."""
    df = pd.DataFrame(ROWS, columns=['Patient Age',
                                     'Index of Multiple Deprivation ',
                                     'Ethnicity', 'Wait Start Date',
                                     'Seen-Date'])
    df['Index of Multiple Deprivation '] = (
        df['Index of Multiple Deprivation '].astype(object).fillna('NULL'))
    df['Ethnicity'] = df['Ethnicity'].fillna('NA')
    path = tmp_path / 'rtt.xlsx'
    df.to_excel(path, sheet_name='RTT', index=False)
    return path
