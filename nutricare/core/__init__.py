"""
Aggregation core: domain model, derived metrics, report assembly, summary
payload builders and the generation gateway.
"""
