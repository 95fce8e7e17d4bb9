"""
grq_validation.reporting: terminal formatting and flat-file export of results.

Nothing here computes metrics; it only renders ``InstrumentMetrics`` and
``PortfolioMetrics`` already produced by the evaluator.

Modules:
  formatters: ASCII tables for the ``evaluate`` command.
  export:     JSON report and flat CSV export.
"""
