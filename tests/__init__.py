"""
Test Suite for Test Data Generation

Covers:
- Pattern extraction
- Profiles (frequency model, sampling, archives)
- DataSampleParser
- Realism validation
- Configuration and utilities
"""
