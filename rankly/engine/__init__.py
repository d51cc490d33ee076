"""Brand Metrics Aggregation & Ranking Engine.

Pure-function pipeline over per-brand metric records:
  1. Selection Filter (scopes in view, allowed competitors)
  2. Scope Aggregator (merge several scopes into one filtered record)
  3. Rank Assigner (competition ranks for every ranked metric)
  4. Derived-Metric Calculator (position / sentiment percentages)
  5. Brand Resolver (owner lookup, fuzzy brand lookup)

Input:  MetricRecord values computed upstream from prompt test scorecards
Output: EngineResult (one ranked MetricRecord for dashboard formatters)
"""
