"""
Utility modules for the catalog manager.

Cross-cutting concerns:
- Records: Product/review line codec
- Storage: File I/O for records, reports and snapshots
- Locale formatter: Localized rendering of products and reviews
- RW lock: Multiple-reader/single-writer lock
"""
