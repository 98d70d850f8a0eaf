"""HTTP boundary for Ninety-Nine."""
