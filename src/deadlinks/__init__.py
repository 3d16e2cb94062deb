"""
Dead link checker: crawls a site from a start URL and verifies every link it finds.
Internal pages are crawled recursively, external links are checked once.
"""
from deadlinks.core import crawl, CrawlReport
from deadlinks.results import FETCH_ERROR, LinkOutcome

__version__ = "1.0.0"
__all__ = ["crawl", "CrawlReport", "FETCH_ERROR", "LinkOutcome"]
