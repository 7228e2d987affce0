"""
Recommendation engine: turns classified seasons plus live fares into a
recommended travel period with savings and earlier/later comparisons.

Modules
-------
pricing    : FareQuote + best_fare_on() + fares_for_query() + passenger_total()
             — fare lookup for one departure date, round trips paired from
             one-way legs, stay-length filtering, group pricing.
comparison : nearest_priced_date() + build_comparison() — "if you go
             earlier / later" scans within a bounded window.
engine     : RecommendationEngine.recommend() + NoPriceDataError.
"""
