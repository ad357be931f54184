"""
Aggregation and filtering over the in-memory record collection.

Modules
-------
engine  : KeyValuePair + MapReduceEngine (map / group / reduce / execute).
tasks   : TaskSpec table binding each TaskType to its map, reduce and
          post-processing steps; run_task() + run_all_analyses().
filters : matches() + apply_filters() + analyze_with_filters() +
          filter_options() — pure functions over AnalysisFilters.
"""
