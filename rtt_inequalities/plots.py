import logging
import textwrap as tw
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from rtt_inequalities import config as cfg

logger = logging.getLogger(__name__)

#Greens for deprivation, blues for ethnicity
IMD_PALETTE = 'Greens_r'
ETHNICITY_PALETTE = ['lightskyblue', 'royalblue', 'midnightblue', 'steelblue',
                     'lightgrey', 'cadetblue', 'dodgerblue']

AXIS_LABELS = {
    cfg.IMD_COL: 'IMD Decile (1 = most deprived)',
    cfg.AGG_ETHNICITY_COL: 'Ethnicity',
    'age_band': 'Age Band',
    'imd_group': 'IMD',
    'minority_group': 'Ethnicity',
}


#Function to plot labels on bars
def show_values_on_bars(axs, numbers=None, rounded=1):
    def _show_on_single_plot(ax):
        patches = list(ax.patches)
        counts = numbers if numbers is not None else [None] * len(patches)
        #One count per bar, zero-height bars included
        for p, n in zip(patches, counts):
            height = p.get_height()
            if np.isnan(height):
                continue
            _x = p.get_x() + p.get_width() / 2
            _y = p.get_y() + height
            value = f'{height:.{rounded}f}'
            if n is not None:
                value = f'{value}\n(n={n:,.0f})'
            ax.text(_x, _y, value, ha='center', va='bottom', fontsize=8)

    if isinstance(axs, np.ndarray):
        for idx, ax in np.ndenumerate(axs):
            _show_on_single_plot(ax)
    else:
        _show_on_single_plot(axs)


def _palette_for(col):
    return ETHNICITY_PALETTE if col == cfg.AGG_ETHNICITY_COL else IMD_PALETTE


def plot_median_wait(summary, x, ax=None):
    """Bar chart of median waiting days per group, labelled with counts."""
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(9, 4))
    data = summary.copy()
    data[x] = data[x].astype(str)
    sns.barplot(data=data, x=x, y='median', hue=x, legend=False,
                palette=_palette_for(x), edgecolor='black', ax=ax)
    show_values_on_bars(ax, numbers=data['n'].tolist())
    ax.set_xticks(ax.get_xticks())
    ax.set_xticklabels([tw.fill(l.get_text(), 15)
                        for l in ax.get_xticklabels()], fontsize=8)
    ax.set_xlabel(AXIS_LABELS.get(x, x))
    ax.set_ylabel('Median Wait (days)')
    ax.set_title('Median Referral to Treatment Wait')
    ax.set_ylim(top=ax.get_ylim()[1] * 1.2)
    return ax


def plot_wait_distribution(df, by, ax=None):
    """Box plot of waiting days for each value of ``by``."""
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(9, 4))
    sns.boxplot(data=df, x=by, y=cfg.WAIT_COL, hue=by, legend=False,
                palette=_palette_for(by), showfliers=False, ax=ax)
    ax.set_xticks(ax.get_xticks())
    ax.set_xticklabels([tw.fill(l.get_text(), 15)
                        for l in ax.get_xticklabels()], fontsize=8)
    ax.set_xlabel(AXIS_LABELS.get(by, by))
    ax.set_ylabel('Waiting Days')
    return ax


def plot_age_distribution(df, ax=None):
    """Stacked age histogram, coloured by aggregated ethnicity."""
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(9, 4))
    sns.histplot(data=df, x=cfg.AGE_COL, hue=cfg.AGG_ETHNICITY_COL,
                 multiple='stack', binwidth=5, palette=ETHNICITY_PALETTE,
                 ax=ax)
    legend = ax.get_legend()
    if legend is not None:
        legend.set_title('')
        sns.move_legend(ax, loc='upper left', bbox_to_anchor=(1, 1))
    ax.set_xlabel('Patient Age')
    ax.set_ylabel('Number of Referrals')
    return ax


def save_figure(fig, path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    logger.info('Saved %s', path)
    return path
