"""
Test suite for PyFastSample package.

This test suite covers:
- Import tests for all modules and submodules
- Unit tests for filters, MAD programs, execution and the sampler driver
- Integration tests for complete resampling workflows
- Command line tools

Run with: pytest
"""
