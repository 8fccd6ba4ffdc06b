import argparse
import logging
import sys
from pathlib import Path

from rtt_inequalities.config import load_config
from rtt_inequalities.errors import PipelineError
from rtt_inequalities.pipeline import run_pipeline
from rtt_inequalities.summary import format_summary_table

logger = logging.getLogger('rtt_inequalities')


def write_outputs(result, out_dir):
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    outputs = {
        'cleaned.csv': result.cleaned,
        'duplicates.csv': result.duplicates,
        'summary_imd_ethnicity.csv': result.summary,
        'summary_age_band.csv': result.age_summary,
        'summary_imd_group.csv': result.imd_group_summary,
        'summary_minority_group.csv': result.minority_summary,
    }
    for name, table in outputs.items():
        table.to_csv(out_dir / name, index=False)
    format_summary_table(result.summary).to_csv(out_dir / 'summary_table.csv')
    logger.info('Wrote outputs to %s', out_dir)


def write_plots(result, out_dir):
    #Only the CLI renders to files, so pick the non-interactive backend here
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    from rtt_inequalities import config as cfg
    from rtt_inequalities import plots
    from rtt_inequalities.summary import summarise_waits

    plot_dir = Path(out_dir) / 'plots'
    for col in (cfg.IMD_COL, cfg.AGG_ETHNICITY_COL, 'age_band', 'imd_group',
                'minority_group'):
        summary = summarise_waits(result.cleaned, col)
        if summary.empty:
            continue
        fig, ax = plt.subplots(1, 1, figsize=(9, 4))
        plots.plot_median_wait(summary, col, ax=ax)
        plots.save_figure(fig, plot_dir / f'median_wait_{col}.png')
    for col in (cfg.IMD_COL, cfg.AGG_ETHNICITY_COL):
        fig, ax = plt.subplots(1, 1, figsize=(9, 4))
        plots.plot_wait_distribution(result.cleaned, col, ax=ax)
        plots.save_figure(fig, plot_dir / f'wait_distribution_{col}.png')
    fig, ax = plt.subplots(1, 1, figsize=(9, 4))
    plots.plot_age_distribution(result.cleaned, ax=ax)
    plots.save_figure(fig, plot_dir / 'age_distribution.png')


def build_parser():
    parser = argparse.ArgumentParser(
        description='Clean RTT referral data and summarise waiting times by '
                    'deprivation decile and ethnicity')
    parser.add_argument('input', help='Path to the RTT spreadsheet')
    parser.add_argument('--sheet', dest='sheet_name', help='Sheet to read')
    parser.add_argument('--config', help='Path to YAML config')
    parser.add_argument('--mapping', dest='mapping_path', type=Path,
                        help='Ethnicity lookup YAML (defaults to the bundled table)')
    parser.add_argument('--min-waiting-days', dest='min_waiting_days', type=int,
                        help='Lowest waiting days kept (inclusive)')
    parser.add_argument('--max-waiting-days', dest='max_waiting_days', type=int,
                        help='Waiting days cut-off (exclusive)')
    parser.add_argument('--dayfirst', dest='dayfirst', action='store_true',
                        help='Read ambiguous dates as day/month/year')
    parser.add_argument('--out', default='output', help='Output directory')
    parser.add_argument('--plots', action='store_true', help='Also save charts')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.set_defaults(dayfirst=None)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format='%(asctime)s - %(levelname)s - %(message)s')
    try:
        config = load_config(args.config,
                             sheet_name=args.sheet_name,
                             mapping_path=args.mapping_path,
                             min_waiting_days=args.min_waiting_days,
                             max_waiting_days=args.max_waiting_days,
                             dayfirst=args.dayfirst)
        result = run_pipeline(args.input, config=config)
    except PipelineError as e:
        logger.error('Pipeline failed: %s (value: %r)', e, e.value)
        return 1
    write_outputs(result, args.out)
    if args.plots:
        write_plots(result, args.out)
    report = result.report
    logger.info('Kept %d of %d rows (%d missing, %d out of range); '
                '%d duplicate groups reported',
                report.rows_out, report.rows_in, report.missing_removed,
                report.out_of_range_removed, result.duplicates.shape[0])
    return 0


if __name__ == '__main__':
    sys.exit(main())
