"""
Property-based tests for the TMS34010 decoder and renderer.

This package hosts Hypothesis strategies and the test entrypoints for both the
fast CI lane and the nightly fuzz job.
"""
