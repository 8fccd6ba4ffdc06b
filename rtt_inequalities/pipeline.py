"""Run the RTT inequality stages end to end.

load -> duplicates -> clean -> aggregate_ethnicity -> summarise

Each stage takes the previous table and returns a new one, so any stage can
also be called on its own.
"""
import logging
import time
from dataclasses import dataclass

import pandas as pd

from rtt_inequalities import config as cfg
from rtt_inequalities.cleaning import CleaningReport, clean_rtt_data
from rtt_inequalities.duplicates import find_duplicate_groups
from rtt_inequalities.ethnicity import (add_agg_ethnicity, add_minority_group,
                                        load_ethnicity_mapping)
from rtt_inequalities.loader import load_rtt_data
from rtt_inequalities.summary import (add_age_band, add_imd_group,
                                      summarise_imd_ethnicity, summarise_waits)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    raw: pd.DataFrame
    duplicates: pd.DataFrame
    cleaned: pd.DataFrame
    report: CleaningReport
    summary: pd.DataFrame
    age_summary: pd.DataFrame
    imd_group_summary: pd.DataFrame
    minority_summary: pd.DataFrame


def process_rtt_data(raw, config=None, mapping=None):
    """Run every stage after loading on an already loaded table."""
    config = config or cfg.PipelineConfig()
    if mapping is None:
        mapping = load_ethnicity_mapping(config.mapping_path)

    logger.info('Checking for duplicate rows...')
    duplicates = find_duplicate_groups(raw)

    logger.info('Cleaning data...')
    cleaned, report = clean_rtt_data(raw, config)

    logger.info('Aggregating ethnicity...')
    cleaned = add_agg_ethnicity(cleaned, mapping)
    cleaned = add_age_band(cleaned, config.age_bins, config.age_labels)
    #Two-way splits: IMD 1-2 vs 3-10, White British vs Ethnic Minority
    cleaned = add_imd_group(cleaned)
    cleaned = add_minority_group(cleaned)

    logger.info('Summarising waits...')
    summary = summarise_imd_ethnicity(cleaned)
    age_summary = summarise_waits(cleaned, 'age_band')
    imd_group_summary = summarise_waits(cleaned, 'imd_group')
    #Unknown/Unwilling rows have no minority group and drop out here
    minority_summary = summarise_waits(cleaned, 'minority_group')

    return PipelineResult(raw=raw, duplicates=duplicates, cleaned=cleaned,
                          report=report, summary=summary,
                          age_summary=age_summary,
                          imd_group_summary=imd_group_summary,
                          minority_summary=minority_summary)


def run_pipeline(path, sheet_name=None, config=None, mapping=None):
    """Load one sheet from ``path`` and process it.

    ``sheet_name`` defaults to the sheet named in ``config``.
    """
    config = config or cfg.PipelineConfig()
    sheet_name = sheet_name or config.sheet_name
    t0 = time.time()
    raw = load_rtt_data(path, sheet_name, config.missing_tokens)
    t1 = time.time()
    logger.info('Data read in %.2f mins', (t1 - t0) / 60)
    result = process_rtt_data(raw, config, mapping)
    logger.info('Analysis run in %.2f mins', (time.time() - t1) / 60)
    return result
