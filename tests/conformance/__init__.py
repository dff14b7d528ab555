"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the transaction processor.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Balance invariants (total, held) after any event sequence
2. atomicity.py - Rejected events leave no trace
3. determinism.py - Reproducible behavior
4. canonicalization.py - Exact amount parsing and formatting

These tests use hypothesis for property-based testing.
"""
