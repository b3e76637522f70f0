"""HTTP quote service for the curve engine."""
