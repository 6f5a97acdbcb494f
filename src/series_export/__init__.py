"""
Series export - published portfolios of one series to a print-ready PDF

Module layout:
- config/     runtime configuration and layout spec loading
- models/     data structures shared by every stage
- api/        admin REST client (preview, dataset, filter options)
- assets/     image deduplication and bounded-concurrency fetching
- codes/      per-user verification (QR) codes
- compose/    dataset + caches -> render-ready pages
- render/     reportlab PDF rendering
- pipeline/   stage definitions, executor, in-memory job tracking
"""

__version__ = "0.1.0"
