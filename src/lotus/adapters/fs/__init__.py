from lotus.adapters.fs.collectors import (
    collect_patterns,
    collect_rules,
    collect_scripts,
    collect_tests,
)

__all__ = ["collect_patterns", "collect_rules", "collect_scripts", "collect_tests"]
