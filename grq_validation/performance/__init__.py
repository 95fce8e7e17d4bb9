"""
Performance engine: validates score-file recommendations against realized
market outcomes over the 90-day window and projects unfinished windows.

Every function here is pure: inputs are immutable ``ScoreBatch`` pieces,
outputs are frozen result types, and "no data" is ``None``.

Modules
-------
splits      Split multiplier and historical → current price adjustment.
buy_price   Entry price resolution within the 5-day window after a score date.
dividends   Dividend accumulation, horizon filtering, next ex-dividend date.
returns     Total return (price + dividends), target percentage, return series.
trend       Zero-intercept least-squares trend line.
projection  Hybrid projector: one strategy per elapsed-time bucket.
portfolio   Equal-weight portfolio series, target, and 90-day performance.
annualize   Compound annualization and cost-of-capital benchmark.
judgement   Outcome classification.
evaluator   Orchestrates all of the above per instrument and per portfolio.
"""
