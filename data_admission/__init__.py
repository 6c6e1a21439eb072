"""
============================================================================
Data Admission Control v1.0.0
============================================================================

Allow/disallow decision record for bringing up a data network, produced
once per evaluation cycle by the network request scheduler.

- DataEvaluation: last-writer mutual exclusivity, allowed reason priority
- Aggregate verdict: order-insensitive whole-evaluation variant
- Configuration: environment driven (DEV-040 on invalid config)
- Observability: Prometheus counters and audit log

============================================================================
"""

__version__ = "1.0.0"
