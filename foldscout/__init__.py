"""
FoldScout Keyword Discovery

An SEO keyword audit core that:
1. Extracts candidate keyword phrases from page HTML
2. Enriches them with search volume (Keywords Everywhere)
3. Verifies real Google rankings within a daily quota (Serper)
4. Identifies competitor domains from the collected SERPs
"""

__version__ = "0.1.0"
