"""simulation — Battle orchestration.

Submodules
----------
scheduler   WorldScheduler — deferred per-entity events (strike contact, …)
battle      Battle — world setup, frame loop, scenario loading, summaries
"""
