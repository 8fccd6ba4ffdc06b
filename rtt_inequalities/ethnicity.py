import logging
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from rtt_inequalities import config as cfg
from rtt_inequalities.errors import ConfigError, UnmappedCategoryError

logger = logging.getLogger(__name__)


class EthnicGroup(str, Enum):
    WHITE_BRITISH = 'White British'
    WHITE_IRISH_OR_OTHER = 'White – Irish or Other'
    BLACK = 'Black'
    MIXED = 'Mixed'
    UNKNOWN_UNWILLING = 'Unknown/Unwilling'
    OTHER = 'Other ethnicities'
    ASIAN = 'Asian'


AGG_ETHNICITY_DTYPE = pd.CategoricalDtype(
    categories=[g.value for g in EthnicGroup], ordered=False)


class EthnicityMapping:
    """Fine-grained ethnicity label -> EthnicGroup, read from the YAML table."""

    def __init__(self, lookup, version=None, source=None):
        self.lookup = dict(lookup)
        self.version = version
        self.source = source

    def __contains__(self, label):
        return label in self.lookup

    def __len__(self):
        return len(self.lookup)

    def __getitem__(self, label):
        #Blank ethnicity counts as unknown
        if pd.isna(label):
            return EthnicGroup.UNKNOWN_UNWILLING
        try:
            return self.lookup[str(label).strip()]
        except KeyError:
            raise UnmappedCategoryError(
                f'Ethnicity {label!r} is not in the ethnicity lookup '
                f'({self.source}); add it to the table', value=label) from None

    @property
    def labels(self):
        return sorted(self.lookup)


class EthnicityTable(BaseModel):
    """Layout of the ethnicity lookup YAML."""

    model_config = ConfigDict(extra='forbid')

    version: int
    groups: Dict[EthnicGroup, Optional[List[str]]]


def _default_mapping_path():
    return resources.files('rtt_inequalities') / 'data' / 'ethnicity_groups.yaml'


def load_ethnicity_mapping(path=None):
    """Read and validate the ethnicity lookup table.

    Defaults to the table shipped with the package.
    """
    source = Path(path) if path is not None else _default_mapping_path()
    try:
        raw = yaml.safe_load(source.read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f'Could not read ethnicity lookup {source}',
                          value=str(source)) from e
    try:
        table = EthnicityTable.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f'Invalid ethnicity lookup {source}: {e}',
                          value=[err['loc'] for err in e.errors()]) from e

    lookup = {}
    for group, labels in table.groups.items():
        for label in labels or []:
            label = label.strip()
            if label in lookup:
                raise ConfigError(f'Ethnicity {label!r} is listed twice in '
                                  f'{source}', value=label)
            lookup[label] = group
    logger.info('Loaded ethnicity lookup v%s: %d labels',
                table.version, len(lookup))
    return EthnicityMapping(lookup, version=table.version, source=source)


def aggregate_ethnicity(value, mapping=None):
    """Aggregated group name for one ethnicity label."""
    if mapping is None:
        mapping = load_ethnicity_mapping()
    return mapping[value].value


def add_agg_ethnicity(df, mapping=None):
    """Add the ``agg_ethnicity`` column. Unlisted labels raise
    UnmappedCategoryError rather than being bucketed."""
    if mapping is None:
        mapping = load_ethnicity_mapping()
    df = df.copy()
    eth = df[cfg.ETHNICITY_COL]
    #Map each distinct label once
    labels = pd.unique(eth.dropna().astype(object))
    groups = {label: mapping[label].value for label in labels}
    agg = eth.astype(object).map(groups)
    agg = agg.fillna(EthnicGroup.UNKNOWN_UNWILLING.value)
    df[cfg.AGG_ETHNICITY_COL] = agg.astype(AGG_ETHNICITY_DTYPE)
    return df


def add_minority_group(df):
    """White British vs Ethnic Minority split.

    Unknown/Unwilling rows are left missing so they drop out of the comparison.
    """
    df = df.copy()
    agg = df[cfg.AGG_ETHNICITY_COL].astype(object)
    df['minority_group'] = np.where(
        agg == EthnicGroup.WHITE_BRITISH.value, 'White British',
        'Ethnic Minority')
    df.loc[agg == EthnicGroup.UNKNOWN_UNWILLING.value, 'minority_group'] = np.nan
    return df
