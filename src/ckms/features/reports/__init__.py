"""
Reporting and aggregation for the central kitchen dashboard.

Reads orders, shipments, production, inventory and alerts through a
``RowSource``, buckets them by day, week or month and serves the results as
JSON reports or CSV exports.
"""
