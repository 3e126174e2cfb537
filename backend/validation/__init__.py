"""
Match Validation Engine.
Reconciles scouted per-alliance measurements against the official match record,
classifies field-level discrepancies by severity, and rolls results into event summaries.
"""
