import pandas as pd

from rtt_inequalities.cleaning import clean_rtt_data
from rtt_inequalities.ethnicity import add_agg_ethnicity
from rtt_inequalities.summary import (add_age_band, add_imd_group,
                                      format_summary_table,
                                      summarise_imd_ethnicity, summarise_waits)


def _group_frame():
    return pd.DataFrame({
        'index_of_multiple_deprivation': [1] * 5 + [4, 4],
        'agg_ethnicity': ['Black'] * 5 + ['Asian', 'Asian'],
        'waiting_days': [5, 5, 6, 20, 21, 10, 30],
    })


def test_linear_quartiles():
    summary = summarise_imd_ethnicity(_group_frame())
    row = summary.loc[(summary['index_of_multiple_deprivation'] == 1)
                      & (summary['agg_ethnicity'] == 'Black')].iloc[0]
    assert row['median'] == 6
    assert row['q1'] == 5
    assert row['q3'] == 20
    assert row['n'] == 5


def test_interpolates_between_order_statistics():
    summary = summarise_waits(_group_frame(), 'agg_ethnicity')
    asian = summary.loc[summary['agg_ethnicity'] == 'Asian'].iloc[0]
    assert asian['median'] == 20
    assert asian['q1'] == 15
    assert asian['q3'] == 25


def test_counts_cover_every_row(raw_rtt, mapping):
    cleaned, _ = clean_rtt_data(raw_rtt)
    cleaned = add_agg_ethnicity(cleaned, mapping)
    summary = summarise_imd_ethnicity(cleaned)
    assert summary['n'].sum() == cleaned.shape[0]


def test_empty_groups_omitted(raw_rtt, mapping):
    cleaned, _ = clean_rtt_data(raw_rtt)
    cleaned = add_agg_ethnicity(cleaned, mapping)
    summary = summarise_imd_ethnicity(cleaned)
    #Categorical columns would give 10 x 7 groups if unobserved ones were kept
    assert summary.shape[0] == 3
    assert (summary['n'] > 0).all()


def test_format_summary_table():
    table = format_summary_table(summarise_imd_ethnicity(_group_frame()))
    assert table.loc[1, 'Black'] == '6 [5–20], n=5'
    assert table.loc[4, 'Asian'] == '20 [15–25], n=2'
    assert pd.isna(table.loc[1, 'Asian'])


def test_format_summary_table_empty():
    assert format_summary_table(pd.DataFrame()).empty


def test_age_band():
    df = pd.DataFrame({'patient_age': [0, 17, 18, 64, 65, 101]})
    out = add_age_band(df)
    assert out['age_band'].astype(str).tolist() == ['0-17', '0-17', '18-39',
                                                    '40-64', '65+', '65+']
    assert 'age_band' not in df.columns


def test_imd_group(raw_rtt):
    out = add_imd_group(raw_rtt)
    assert out['imd_group'].iloc[0] == 'IMD 3-10'
    assert out['imd_group'].iloc[2] == 'IMD 1-2'
    assert pd.isna(out['imd_group'].iloc[5])
