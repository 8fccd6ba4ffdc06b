import logging
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from rtt_inequalities.errors import ConfigError

logger = logging.getLogger(__name__)

# =============================================================================
# % Defaults
# =============================================================================
#Sheet holding the RTT extract
SHEET_NAME = 'RTT'
#Strings read as missing on load (blank cells are always missing)
MISSING_TOKENS = ('', 'NULL', 'NA')

#Column names after normalisation
AGE_COL = 'patient_age'
IMD_COL = 'index_of_multiple_deprivation'
ETHNICITY_COL = 'ethnicity'
START_DATE_COL = 'wait_start_date'
SEEN_DATE_COL = 'seen_date'
WAIT_COL = 'waiting_days'
AGG_ETHNICITY_COL = 'agg_ethnicity'
CORE_COLUMNS = (AGE_COL, IMD_COL, ETHNICITY_COL, START_DATE_COL, SEEN_DATE_COL)

#1 = most deprived decile, 10 = least deprived
IMD_DECILES = tuple(range(1, 11))

#Waiting days kept: lower bound inclusive, upper bound exclusive
MIN_WAITING_DAYS = 0
MAX_WAITING_DAYS = 3000

#Age bands, right edge exclusive
AGE_BINS = (0, 18, 40, 65, 200)
AGE_LABELS = ('0-17', '18-39', '40-64', '65+')


class PipelineConfig(BaseModel):
    """Pipeline settings, validated on construction."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    sheet_name: str = SHEET_NAME
    missing_tokens: Tuple[str, ...] = MISSING_TOKENS
    min_waiting_days: int = MIN_WAITING_DAYS
    max_waiting_days: int = MAX_WAITING_DAYS
    dayfirst: bool = False
    age_bins: Tuple[int, ...] = AGE_BINS
    age_labels: Tuple[str, ...] = AGE_LABELS
    mapping_path: Optional[Path] = None

    @model_validator(mode='after')
    def check_ranges(self):
        if self.min_waiting_days >= self.max_waiting_days:
            raise ValueError('min_waiting_days must be below max_waiting_days')
        if len(self.age_labels) != len(self.age_bins) - 1:
            raise ValueError('age_labels needs one label per age band')
        return self

    def with_overrides(self, **overrides):
        """Copy of the config with any non-None overrides applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return build_config(values)


def build_config(values, source='config'):
    """Validate ``values`` into a PipelineConfig, raising ConfigError."""
    try:
        return PipelineConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f'Invalid {source}: {e}',
                          value=[err['loc'] for err in e.errors()]) from e


def load_config(path=None, **overrides):
    """Build a PipelineConfig from an optional YAML file plus overrides."""
    values = {}
    source = 'config'
    if path is not None:
        path = Path(path)
        source = f'config file {path}'
        try:
            with path.open('r', encoding='utf-8') as f:
                values = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f'Could not read config file {path}',
                              value=str(path)) from e
        if not isinstance(values, dict):
            raise ConfigError(f'Config file {path} must hold a mapping',
                              value=str(path))
        logger.info('Loaded config from %s', path)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return build_config(values, source)
