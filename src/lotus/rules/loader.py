from pathlib import Path

import yaml
from pydantic import ValidationError

from lotus.core.errors import ConfigurationError
from lotus.rules.models import RunnerRules

RULES_FILE = "lotus.yaml"


def load_rules(path: Path | None, required: bool = False) -> RunnerRules:
    """
    Load and validate a lotus.yaml file.

    A path of None, a missing file that is not required, or an empty file
    yields the defaults.
    Raises ConfigurationError if the YAML or the schema is invalid.
    """
    if path is not None and required and not path.exists():
        raise ConfigurationError(f"Configuration file not found at: {path}")
    if path is None or not path.exists():
        return RunnerRules()

    try:
        with open(path) as f:
            content = f.read()
    except OSError as e:
        raise ConfigurationError(f"Reading the configuration file {path}: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e

    if data is None:
        return RunnerRules()

    try:
        return RunnerRules.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed for {path}:\n{e}") from e
