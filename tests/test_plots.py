import matplotlib.pyplot as plt
import pandas as pd

from rtt_inequalities import plots
from rtt_inequalities.cleaning import clean_rtt_data
from rtt_inequalities.ethnicity import add_agg_ethnicity
from rtt_inequalities.summary import summarise_waits


def _cleaned(raw_rtt, mapping):
    cleaned, _ = clean_rtt_data(raw_rtt)
    return add_agg_ethnicity(cleaned, mapping)


def test_median_wait_labels_bars(raw_rtt, mapping):
    summary = summarise_waits(_cleaned(raw_rtt, mapping), 'agg_ethnicity')
    ax = plots.plot_median_wait(summary, 'agg_ethnicity')
    labels = [t.get_text() for t in ax.texts]
    assert any('(n=2)' in l for l in labels)
    assert ax.get_ylabel() == 'Median Wait (days)'
    plt.close('all')


def test_wait_distribution(raw_rtt, mapping):
    ax = plots.plot_wait_distribution(_cleaned(raw_rtt, mapping),
                                      'index_of_multiple_deprivation')
    assert ax.get_ylabel() == 'Waiting Days'
    plt.close('all')


def test_save_figure(raw_rtt, mapping, tmp_path):
    fig, ax = plt.subplots()
    plots.plot_age_distribution(_cleaned(raw_rtt, mapping), ax=ax)
    path = plots.save_figure(fig, tmp_path / 'charts' / 'age.png')
    assert path.is_file()


def test_zero_median_keeps_counts_aligned():
    summary = pd.DataFrame({'g': ['a', 'b'], 'median': [0.0, 10.0],
                            'n': [3, 7]})
    ax = plots.plot_median_wait(summary, 'g')
    labels = [t.get_text() for t in ax.texts]
    assert '0.0\n(n=3)' in labels
    assert '10.0\n(n=7)' in labels
    plt.close('all')
