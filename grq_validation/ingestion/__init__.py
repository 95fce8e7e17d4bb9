"""
Ingestion layer: turns batch documents on disk into validated ``ScoreBatch`` objects.

Submodules:
  batch_loader — JSON score-batch loader (``load_batch_json``, ``BatchLoadError``)
"""
