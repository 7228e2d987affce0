"""
Orchestration: wires stores, seasonality, recommendation and price band
into one ``analyze_route()`` call per traveller query.
"""
