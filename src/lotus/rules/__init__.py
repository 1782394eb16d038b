from lotus.rules.loader import RULES_FILE, load_rules
from lotus.rules.models import HealthRules, PortRules, RunnerRules

__all__ = ["RULES_FILE", "load_rules", "HealthRules", "PortRules", "RunnerRules"]
